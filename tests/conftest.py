import pytest


ERAS_CV_TEXT = """John Doe, MD
Medical Education
State University School of Medicine
Peer Reviewed Journal Articles/Abstracts
Smith JA, Doe RK. A Study of Things. J Med. 2020. Publication Status: Published.
Doe RK, Lee B, Park C. Outcomes of resident
training in rural clinics. Am J Surg. 2019 Mar;217(3):45-50. Publication Status: Published.
Poster Presentation
Doe RK, Smith JA. Annual Meeting of Surgeons. Poster presented: Wound care in the elderly. Boston, MA; 05/12/2019.
Awards and Honors
Dean's List
"""


@pytest.fixture
def eras_cv_text():
    return ERAS_CV_TEXT
