import pytest

from tetelek.schemas.tetel import Osszegzes, Section, Subsection, TetelSummary
from tetelek.text.markdown import build_speech_text, estimate_reading_minutes, strip_markdown


def words(count: int) -> str:
    return ' '.join(['szó'] * count)


@pytest.mark.parametrize(
    ('markdown', 'expected'),
    [
        ('# Cím\n\n**félkövér** szöveg', 'Cím félkövér szöveg'),
        ('<p>Hello <b>world</b>&nbsp;!</p>', 'Hello world!'),
        ('Érték: {valtozo} vége', 'Érték: vége'),
        ('Lásd [ezt](https://pelda.hu/a) itt', 'Lásd itt'),
        ('Kép: ![ábra](kep.png) vége', 'Kép: vége'),
        ('Használd a `print()` függvényt', 'Használd a függvényt'),
        ('Előtte\n```\nlista[0](x)\n```\nUtána', 'Előtte Utána'),
        ('- első\n- második\n> idézet', 'első második idézet'),
        ('   sok     szóköz\t\tés\n\nsor   ', 'sok szóköz és sor'),
        ('', ''),
    ],
)
def test_strip_markdown_removes_markup(markdown: str, expected: str) -> None:
    assert strip_markdown(markdown) == expected


def test_strip_markdown_treats_none_as_empty() -> None:
    assert strip_markdown(None) == ''


@pytest.mark.parametrize(
    'markdown',
    [
        '## Fejezet\n\n*dőlt* és __aláhúzott__',
        '<div class="note">Megjegyzés {{ név }}</div>',
        '1. [Hivatkozás](http://pelda.hu) és ![kép](a.png)',
        'Kód: ```python\nprint("hi")\n``` vége',
        'Sima szöveg jelölés nélkül',
    ],
)
def test_strip_markdown_is_idempotent(markdown: str) -> None:
    once = strip_markdown(markdown)

    assert strip_markdown(once) == once


def test_estimate_reading_minutes_for_empty_input_is_zero() -> None:
    assert estimate_reading_minutes([], None) == 0


@pytest.mark.parametrize(('word_count', 'minutes'), [(1, 1), (200, 1), (201, 2), (400, 2), (401, 3)])
def test_estimate_reading_minutes_rounds_up(word_count: int, minutes: int) -> None:
    sections = [Section(id=1, content=words(word_count))]

    assert estimate_reading_minutes(sections) == minutes


def test_estimate_reading_minutes_counts_subsections_and_summary() -> None:
    sections = [
        Section(
            id=1,
            content='**egy** _kettő_',
            subsections=[Subsection(id=1, title='három', description='négy')],
        ),
    ]

    assert estimate_reading_minutes(sections, Osszegzes(id=1, content=words(196))) == 1
    assert estimate_reading_minutes(sections, Osszegzes(id=1, content=words(197))) == 2


def test_estimate_reading_minutes_ignores_missing_optional_fields() -> None:
    sections = [Section(id=1, content='egy', subsections=[Subsection(id=1)]), Section(id=2, content=None)]

    assert estimate_reading_minutes(sections, Osszegzes(id=None, content=None)) == 1


def test_build_speech_text_joins_non_empty_fragments_in_order() -> None:
    item = TetelSummary(id=1, name='**Tétel** 1')
    sections = [
        Section(
            id=1,
            content='# Bevezetés',
            subsections=[Subsection(id=1, title=None, description='Leírás')],
        ),
        Section(id=2, content=''),
        Section(id=3, content='Második [rész](http://pelda.hu)'),
    ]

    text = build_speech_text(item, sections, Osszegzes(id=1, content='> Vége'))

    assert text == 'Tétel 1 Bevezetés Leírás Második Összegzés: Vége'


def test_build_speech_text_without_summary_has_no_prefix() -> None:
    item = TetelSummary(id=1, name='Tétel')

    assert build_speech_text(item, [Section(id=1, content='Tartalom')]) == 'Tétel Tartalom'
    assert build_speech_text(item, [], Osszegzes(id=1, content='')) == 'Tétel'
