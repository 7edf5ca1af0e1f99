"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Typed-reference discriminator for polymorphic ownership (ExternalLink, EntityMerge)."""

    POLITICIAN = "politician"
    PARTY = "party"
    AFFAIR = "affair"
    MANDATE = "mandate"


class DataSource(StrEnum):
    # authoritative registries
    ASSEMBLEE_NATIONALE = "assemblee_nationale"
    SENAT = "senat"
    PARLEMENT_EUROPEEN = "parlement_europeen"
    GOUVERNEMENT = "gouvernement"

    # knowledge graph used as a pivot between registries
    WIKIDATA = "wikidata"

    # secondary sources matched on names
    HATVP = "hatvp"
    RNE = "rne"
    NOSDEPUTES = "nosdeputes"

    MANUAL = "manual"


class MatchMethod(StrEnum):
    EXTERNAL_ID = "external_id"
    WIKIDATA_PIVOT = "wikidata_pivot"
    NAME_ONLY = "name_only"
    MANUAL = "manual"


class MandateType(StrEnum):
    DEPUTE = "depute"
    SENATEUR = "senateur"
    DEPUTE_EUROPEEN = "depute_europeen"
    PRESIDENT_REPUBLIQUE = "president_republique"
    PREMIER_MINISTRE = "premier_ministre"
    MINISTRE = "ministre"
    MINISTRE_DELEGUE = "ministre_delegue"
    SECRETAIRE_ETAT = "secretaire_etat"
    PRESIDENT_PARTI = "president_parti"
    MAIRE = "maire"
    ADJOINT_MAIRE = "adjoint_maire"
    PRESIDENT_REGION = "president_region"
    PRESIDENT_DEPARTEMENT = "president_departement"
    CONSEILLER_REGIONAL = "conseiller_regional"
    CONSEILLER_DEPARTEMENTAL = "conseiller_departemental"
    CONSEILLER_MUNICIPAL = "conseiller_municipal"


class AffairCategory(StrEnum):
    CORRUPTION = "corruption"
    CORRUPTION_PASSIVE = "corruption_passive"
    TRAFIC_INFLUENCE = "trafic_influence"
    PRISE_ILLEGALE_INTERETS = "prise_illegale_interets"
    FAVORITISME = "favoritisme"
    DETOURNEMENT_FONDS_PUBLICS = "detournement_fonds_publics"
    EMPLOI_FICTIF = "emploi_fictif"
    FINANCEMENT_ILLEGAL_CAMPAGNE = "financement_illegal_campagne"
    FINANCEMENT_ILLEGAL_PARTI = "financement_illegal_parti"
    FRAUDE_FISCALE = "fraude_fiscale"
    BLANCHIMENT = "blanchiment"
    ABUS_BIENS_SOCIAUX = "abus_biens_sociaux"
    ABUS_CONFIANCE = "abus_confiance"
    RECEL = "recel"
    HARCELEMENT_MORAL = "harcelement_moral"
    HARCELEMENT_SEXUEL = "harcelement_sexuel"
    AGRESSION_SEXUELLE = "agression_sexuelle"
    VIOLENCE = "violence"
    DIFFAMATION = "diffamation"
    INJURE = "injure"
    INCITATION_HAINE = "incitation_haine"
    AUTRE = "autre"


class DuplicateConfidence(StrEnum):
    CERTAIN = "certain"
    HIGH = "high"
    POSSIBLE = "possible"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {
    DuplicateConfidence.CERTAIN: 3,
    DuplicateConfidence.HIGH: 2,
    DuplicateConfidence.POSSIBLE: 1,
}


class DuplicateSignal(StrEnum):
    """Signal that contributed most to a duplicate score."""

    ECLI = "ecli"
    POURVOI_NUMBER = "pourvoi_number"
    CASE_NUMBER = "case_number"
    TITLE_EXACT = "title_exact"
    TITLE_PARTIAL = "title_partial"
    EVENT_DATE = "event_date"
    CATEGORY = "category"


class MergeReason(StrEnum):
    DUPLICATE = "duplicate"
    MANUAL = "manual"
