"""Fold a duplicate affair into its survivor.

``plan_merge`` is pure and is what a dry run logs. ``apply_merge`` mutates both
records in memory; deleting the loser and committing is the caller's job and must
happen in the same unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from politrack.domain.errors import MergeError

if TYPE_CHECKING:
    from politrack.domain.model import (
        Affair,
        AffairEvent,
        AffairPressLink,
        AffairSource,
        ExternalLink,
    )

log = logging.getLogger(__name__)


def choose_survivor(a: Affair, b: Affair) -> tuple[Affair, Affair]:
    """Return ``(survivor, loser)``.

    More source rows wins; on a tie the older record wins; ids settle the rest so
    the choice never depends on argument order.
    """

    def rank(affair: Affair) -> tuple[int, float, str]:
        return (-len(affair.sources), affair.created_at.timestamp(), str(affair.id))

    survivor, loser = sorted((a, b), key=rank)
    return survivor, loser


@dataclass(frozen=True, slots=True, kw_only=True)
class MergePlan:
    survivor: Affair
    loser: Affair
    sources_to_move: tuple[AffairSource, ...]
    sources_to_drop: tuple[AffairSource, ...]
    events_to_move: tuple[AffairEvent, ...]
    press_links_to_move: tuple[AffairPressLink, ...]
    press_links_to_drop: tuple[AffairPressLink, ...]
    links_to_move: tuple[ExternalLink, ...]
    links_to_drop: tuple[ExternalLink, ...]
    fill_ecli: str | None
    fill_pourvoi_number: str | None
    added_case_numbers: frozenset[str]

    def describe(self) -> str:
        return (
            f"keep {self.survivor.id} ({self.survivor.title!r}), "
            f"remove {self.loser.id} ({self.loser.title!r}): "
            f"move {len(self.sources_to_move)} sources "
            f"(skip {len(self.sources_to_drop)} duplicate URLs), "
            f"{len(self.events_to_move)} events, "
            f"{len(self.press_links_to_move)} press links, "
            f"{len(self.links_to_move)} external links"
        )


def plan_merge(a: Affair, b: Affair) -> MergePlan:
    if a.id == b.id:
        raise MergeError(f"cannot merge affair {a.id} into itself")
    if a.politician_id != b.politician_id:
        raise MergeError(
            f"affairs {a.id} and {b.id} belong to different politicians; refusing to merge"
        )

    survivor, loser = choose_survivor(a, b)

    known_urls = survivor.source_urls()
    sources_to_move: list[AffairSource] = []
    sources_to_drop: list[AffairSource] = []
    for source in loser.sources:
        if source.url in known_urls:
            sources_to_drop.append(source)
        else:
            known_urls.add(source.url)
            sources_to_move.append(source)

    known_articles = survivor.press_article_ids()
    press_to_move: list[AffairPressLink] = []
    press_to_drop: list[AffairPressLink] = []
    for press_link in loser.press_links:
        if press_link.article_id in known_articles:
            press_to_drop.append(press_link)
        else:
            known_articles.add(press_link.article_id)
            press_to_move.append(press_link)

    linked_sources = {link.source for link in survivor.external_links}
    links_to_move: list[ExternalLink] = []
    links_to_drop: list[ExternalLink] = []
    for link in loser.external_links:
        if link.source in linked_sources:
            links_to_drop.append(link)
        else:
            linked_sources.add(link.source)
            links_to_move.append(link)

    return MergePlan(
        survivor=survivor,
        loser=loser,
        sources_to_move=tuple(sources_to_move),
        sources_to_drop=tuple(sources_to_drop),
        events_to_move=loser.events,
        press_links_to_move=tuple(press_to_move),
        press_links_to_drop=tuple(press_to_drop),
        links_to_move=tuple(links_to_move),
        links_to_drop=tuple(links_to_drop),
        fill_ecli=loser.ecli if not survivor.ecli else None,
        fill_pourvoi_number=loser.pourvoi_number if not survivor.pourvoi_number else None,
        added_case_numbers=frozenset(loser.case_numbers - survivor.case_numbers),
    )


def apply_merge(plan: MergePlan) -> None:
    """Re-parent the loser's children onto the survivor.

    Rows listed as duplicates stay on the loser and disappear with it.
    """

    survivor = plan.survivor
    loser = plan.loser

    for source in plan.sources_to_move:
        loser.remove_source(source)
        survivor.add_source(source)
    for event in plan.events_to_move:
        loser.remove_event(event)
        survivor.add_event(event)
    for press_link in plan.press_links_to_move:
        loser.remove_press_link(press_link)
        survivor.add_press_link(press_link)
    for link in plan.links_to_move:
        loser.release_external_link(link)
        survivor.adopt_external_link(link)

    if plan.fill_ecli:
        survivor.ecli = plan.fill_ecli
    if plan.fill_pourvoi_number:
        survivor.pourvoi_number = plan.fill_pourvoi_number
    if plan.added_case_numbers:
        # reassigned so ORM change tracking sees the new set
        survivor.case_numbers = survivor.case_numbers | plan.added_case_numbers

    log.info("Merged affair %s into %s", loser.id, survivor.id)
