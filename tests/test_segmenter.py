"""
Tests for publication block segmentation.

Section detection, heading re-injection, sub-sectioning and entry splitting.
"""

from cv_checker.core.segmenter import (
    DEFAULT_HEADING,
    extract_publication_block,
    is_next_section_header,
    is_publication_header,
    reinject_headings,
    segment_publications,
    split_entries,
    split_subsections,
)
from cv_checker.core.text_normalization import normalize_text


# ===== HEADER DETECTION =====

def test_publication_header_detection():
    assert is_publication_header("Publications")
    assert is_publication_header("  PUBLICATIONS:  ")
    assert is_publication_header("Peer Reviewed Journal Articles/Abstracts")
    assert is_publication_header("Poster Presentation")
    assert is_publication_header("Oral Presentations")
    assert is_publication_header("Book Chapters")


def test_non_publication_header():
    assert not is_publication_header("Smith JA, Doe RK. A Study of Things.")
    assert not is_publication_header("Abstracts of the annual meeting were reviewed")
    assert not is_publication_header("")


def test_next_section_header_detection():
    assert is_next_section_header("Education", "Publication Status: Published.")
    assert is_next_section_header("Work Experience", "")
    assert is_next_section_header("Awards and Honors", None)
    assert is_next_section_header("EDUCATION", "Journal of Graduate")


def test_wrapped_journal_name_is_not_a_section_end():
    assert not is_next_section_header("Medical Education", "Smith JA. Title. Journal of Graduate")


def test_entry_lines_are_not_section_ends():
    assert not is_next_section_header("Doe RK. Experience with residents.", "x.")
    assert not is_next_section_header("Poster Presentation", "x.")


# ===== HEADING RE-INJECTION =====

def test_inline_heading_moved_to_own_line():
    text = "Publication Status: Published. Poster Presentation Doe RK, Smith JA. Meeting."
    out = reinject_headings(text)
    assert "\nPoster Presentation\n" in out
    assert out.startswith("Publication Status: Published.")
    assert out.rstrip().endswith("Doe RK, Smith JA. Meeting.")


def test_entry_marker_with_colon_left_alone():
    text = "Smith JA. Title. Oral Presentation: Regional Forum; 10/03/2021."
    assert reinject_headings(text) == text


def test_poster_presented_marker_left_alone():
    text = "Meeting. Poster presented: Title."
    assert reinject_headings(text) == text


# ===== BLOCK EXTRACTION =====

def test_block_bounded_by_next_section(eras_cv_text):
    block = extract_publication_block(reinject_headings(normalize_text(eras_cv_text)))
    assert block.lstrip().startswith("Peer Reviewed Journal Articles/Abstracts")
    assert "Smith JA, Doe RK" in block
    assert "Awards and Honors" not in block
    assert "Dean's List" not in block
    assert "State University" not in block


def test_block_falls_back_to_whole_text():
    text = "Smith JA. Title. J Med. 2020.\nDoe RK. Other. Surgery. 2019."
    assert extract_publication_block(text) == text


# ===== SUB-SECTIONS =====

def test_subsections_by_heading():
    block = (
        "Peer Reviewed Journal Articles/Abstracts\n"
        "Smith JA. Title. J Med. 2020. Publication Status: Published.\n"
        "Poster Presentation\n"
        "Doe RK. Meeting. Poster presented: Poster title.\n"
        "Oral Presentation\n"
        "Lee B. Talk. Oral presentation: Forum; 01/02/2020.\n"
    )
    subs = split_subsections(block)
    assert [s.kind for s in subs] == ["journal", "poster", "oral"]
    assert subs[0].heading == "Peer Reviewed Journal Articles/Abstracts"
    assert subs[1].text.startswith("Doe RK.")


def test_unheaded_text_goes_to_default_heading():
    subs = split_subsections("Publications\nSmith JA. Title. J Med. 2020.")
    assert len(subs) == 1
    assert subs[0].heading == DEFAULT_HEADING
    assert subs[0].kind == "default"
    assert subs[0].text == "Smith JA. Title. J Med. 2020."


# ===== ENTRY SPLITTING =====

def test_split_on_status_markers():
    text = (
        "Smith JA. Title one. J Med. 2020. Publication Status: Published.\n"
        "Doe RK. Title two. Surgery. 2019. Publication Status: Accepted.\n"
        "Page 2 of 5"
    )
    entries = split_entries(text)
    assert entries == [
        "Smith JA. Title one. J Med. 2020. Publication Status: Published.",
        "Doe RK. Title two. Surgery. 2019. Publication Status: Accepted.",
    ]


def test_split_on_author_pattern():
    text = "Smith JA, Doe RK. Title one. J Med. 2020.\nLee B, Park C. Title two. Surgery. 2021."
    entries = split_entries(text)
    assert entries == [
        "Smith JA, Doe RK. Title one. J Med. 2020.",
        "Lee B, Park C. Title two. Surgery. 2021.",
    ]


def test_co_authors_do_not_start_entries():
    text = "Smith JA, Doe RK, Lee B, Park C. One long author list. J Med. 2020."
    assert split_entries(text) == [text]


def test_split_on_blank_lines():
    text = "first entry without author initials.\n\nsecond entry, also plain."
    assert split_entries(text) == ["first entry without author initials.", "second entry, also plain."]


def test_single_fragment_when_no_boundary():
    text = "A single entry\nwrapped over lines"
    assert split_entries(text) == ["A single entry wrapped over lines"]


def test_empty_subsection():
    assert split_entries("") == []
    assert split_entries("   \n ") == []


# ===== FULL SEGMENTATION =====

def test_segment_eras_text(eras_cv_text):
    fragments = segment_publications(normalize_text(eras_cv_text))
    assert len(fragments) == 2
    assert all(f.section == "Peer Reviewed Journal Articles/Abstracts" for f in fragments)
    assert fragments[0].text == "Smith JA, Doe RK. A Study of Things. J Med. 2020. Publication Status: Published."
    assert fragments[1].text.startswith("Doe RK, Lee B, Park C. Outcomes of resident training")


def test_poster_and_oral_excluded(eras_cv_text):
    fragments = segment_publications(normalize_text(eras_cv_text))
    assert not any("Poster presented" in f.text for f in fragments)


def test_inline_eras_headings_after_pdf_extraction():
    text = (
        "Peer Reviewed Journal Articles/Abstracts Smith JA, Doe RK. A Study of Things. J Med. 2020. "
        "Publication Status: Published. Lee B. Second study. Surgery. 2021. Publication Status: Published. "
        "Oral Presentation Park C. Talk title. Oral presentation: Forum; 01/02/2020."
    )
    fragments = segment_publications(text)
    assert [f.text for f in fragments] == [
        "Smith JA, Doe RK. A Study of Things. J Med. 2020. Publication Status: Published.",
        "Lee B. Second study. Surgery. 2021. Publication Status: Published.",
    ]


def test_segment_empty_input():
    assert segment_publications("") == []
    assert segment_publications("   ") == []
