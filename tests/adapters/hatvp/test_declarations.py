from __future__ import annotations

from datetime import date

import pytest

from elusync.adapters.hatvp import declaration_type, stage_declarations
from elusync.domain.model import DataSource, DeclarationType

HEADER = (
    "civilite;prenom;nom;classement;type_mandat;qualite;type_document;departement;"
    "date_publication;date_depot;nom_fichier;url_dossier;open_data;statut_publication;"
    "id_origine;url_photo"
)
CSV = "\n".join(
    [
        HEADER,
        "Mme;Marie;DUPONT;dupontmarie;depute;Députée;di;69;2024-10-02;2024-09-15;"
        "dupont-marie-di1234-depute.pdf;/pages_nominatives/dupont-marie;;Livrée;841605;"
        "/photos/dupont-marie.jpg",
        "M.;Paul;BERNARD;bernardpaul;senateur;Sénateur;dspfm;33;;15/09/2023;"
        "bernard-paul-dspfm-senateur.pdf;/pages_nominatives/bernard-paul;;Livrée;21001F;",
        "M.;Jean;Durand;durandjean;commune;Maire;di;75;;;durand.pdf;;;Livrée;;",
        "M.;;Anonyme;anonyme;depute;Député;di;75;;;anonyme.pdf;;;Livrée;;",
    ]
)


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("di", DeclarationType.INTERETS),
        ("DSP", DeclarationType.PATRIMOINE_DEBUT_MANDAT),
        ("dspm", DeclarationType.PATRIMOINE_MODIFICATION),
        ("dspfm", DeclarationType.PATRIMOINE_FIN_MANDAT),
        (None, DeclarationType.INTERETS),
    ],
)
def test_declaration_type(code: str | None, expected: DeclarationType) -> None:
    assert declaration_type(code) is expected


def test_deputy_declaration_carries_official_anchor() -> None:
    feed = stage_declarations(CSV)

    assert feed.source is DataSource.HATVP
    record = feed.records[0]
    anchors = {anchor.source: anchor for anchor in record.person.anchors}
    assert anchors[DataSource.ASSEMBLEE_NATIONALE].value == "PA841605"
    assert anchors[DataSource.HATVP].value == "pages_nominatives/dupont-marie"
    assert anchors[DataSource.HATVP].url == "https://www.hatvp.fr/pages_nominatives/dupont-marie"
    assert record.person.photo_url == "https://www.hatvp.fr/photos/dupont-marie.jpg"
    assert record.mandate is None

    declaration = record.declaration
    assert declaration is not None
    assert declaration.declaration_type is DeclarationType.INTERETS
    assert declaration.natural_key == "dupont-marie-di1234-depute.pdf"
    assert declaration.deposit_date == date(2024, 9, 15)
    assert declaration.published_on == date(2024, 10, 2)
    assert declaration.url == (
        "https://www.hatvp.fr/livraison/dossiers/dupont-marie-di1234-depute.pdf"
    )


def test_senator_anchor_drops_trailing_letter() -> None:
    record = stage_declarations(CSV).records[1]

    anchors = {anchor.source: anchor.value for anchor in record.person.anchors}
    assert anchors[DataSource.SENAT] == "21001"
    assert record.declaration is not None
    assert record.declaration.declaration_type is DeclarationType.PATRIMOINE_FIN_MANDAT
    assert record.declaration.deposit_date == date(2023, 9, 15)


def test_local_mandates_skipped_and_nameless_rows_reported() -> None:
    feed = stage_declarations(CSV)

    assert [record.row for record in feed.records] == [1, 2]
    assert feed.errors == ["Row 4: missing name"]
