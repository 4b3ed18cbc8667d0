import pytest

from portfolio_assistant.knowledge.doc_types import (
    DocType,
    PRIORITY_BY_TYPE,
    infer_doc_type,
    priority_for,
)


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("projects.md", DocType.PROJECTS),
        ("Side-Project-Notes.MD", DocType.PROJECTS),
        ("experience.md", DocType.EXPERIENCE),
        ("faq.md", DocType.FAQ),
        ("about_me.md", DocType.ABOUT),
        ("skills.md", DocType.SKILLS),
        ("contact.md", DocType.CONTACT),
        ("bot_identity.md", DocType.BOT_IDENTITY),
        ("bot-identity.md", DocType.BOT_IDENTITY),
        ("misc.md", DocType.OTHER),
    ],
)
def test_infer_doc_type(filename, expected):
    assert infer_doc_type(filename) == expected


def test_first_keyword_in_priority_order_wins():
    # "project" is checked before "experience" and "faq"
    assert infer_doc_type("project-experience-faq.md") == DocType.PROJECTS
    assert infer_doc_type("skills-contact.md") == DocType.SKILLS


def test_every_doc_type_has_priority():
    assert set(PRIORITY_BY_TYPE) == set(DocType)
    assert priority_for(DocType.PROJECTS) == 1.0
    assert priority_for(DocType.SKILLS) < priority_for(DocType.PROJECTS)
    assert priority_for(DocType.OTHER) == 0.5
