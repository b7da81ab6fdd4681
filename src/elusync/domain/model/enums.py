"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DataSource(StrEnum):
    """Closed set of integrated feeds; one identity-anchor namespace each."""

    ASSEMBLEE_NATIONALE = "assemblee_nationale"
    SENAT = "senat"
    GOUVERNEMENT = "gouvernement"
    PARLEMENT_EUROPEEN = "parlement_europeen"
    RNE = "rne"
    HATVP = "hatvp"
    WIKIDATA = "wikidata"
    JUDILIBRE = "judilibre"
    NOSDEPUTES = "nosdeputes"
    NOSSENATEURS = "nossenateurs"
    MANUAL = "manual"


class OwnerType(StrEnum):
    """Discriminator for what an external identifier points at."""

    PERSON = "person"
    ORGANIZATION = "organization"


class MandateType(StrEnum):
    DEPUTE = "depute"
    SENATEUR = "senateur"
    DEPUTE_EUROPEEN = "depute_europeen"
    MAIRE = "maire"
    PREMIER_MINISTRE = "premier_ministre"
    MINISTRE = "ministre"
    MINISTRE_DELEGUE = "ministre_delegue"
    SECRETAIRE_ETAT = "secretaire_etat"


GOVERNMENT_MANDATE_TYPES = frozenset(
    {
        MandateType.PREMIER_MINISTRE,
        MandateType.MINISTRE,
        MandateType.MINISTRE_DELEGUE,
        MandateType.SECRETAIRE_ETAT,
    }
)


class DeclarationType(StrEnum):
    INTERETS = "interets"
    PATRIMOINE_DEBUT_MANDAT = "patrimoine_debut_mandat"
    PATRIMOINE_MODIFICATION = "patrimoine_modification"
    PATRIMOINE_FIN_MANDAT = "patrimoine_fin_mandat"


class JudicialStatus(StrEnum):
    ENQUETE = "enquete"
    MISE_EN_EXAMEN = "mise_en_examen"
    CONDAMNATION_PREMIERE_INSTANCE = "condamnation_premiere_instance"
    CONDAMNATION_DEFINITIVE = "condamnation_definitive"
    RELAXE = "relaxe"


class JudicialCategory(StrEnum):
    CORRUPTION = "corruption"
    TRAFIC_INFLUENCE = "trafic_influence"
    PRISE_ILLEGALE_INTERETS = "prise_illegale_interets"
    FAVORITISME = "favoritisme"
    DETOURNEMENT_FONDS_PUBLICS = "detournement_fonds_publics"
    FRAUDE_FISCALE = "fraude_fiscale"
    BLANCHIMENT = "blanchiment"
    ABUS_BIENS_SOCIAUX = "abus_biens_sociaux"
    EMPLOI_FICTIF = "emploi_fictif"
    FINANCEMENT_ILLEGAL_PARTI = "financement_illegal_parti"
    VIOLENCE = "violence"
    AGRESSION_SEXUELLE = "agression_sexuelle"
    HARCELEMENT = "harcelement"
    DIFFAMATION = "diffamation"
    AUTRE = "autre"


class VotePosition(StrEnum):
    POUR = "pour"
    CONTRE = "contre"
    ABSTENTION = "abstention"
    NON_VOTANT = "non_votant"
    ABSENT = "absent"
