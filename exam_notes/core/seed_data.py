"""Sample content used to populate an empty installation."""

from __future__ import annotations

SAMPLE_CATEGORIES: list[dict[str, str]] = [
    {"name": "Science", "name_si": "විද්‍යාව", "description": "Science subjects for A/L students"},
    {"name": "Mathematics", "name_si": "ගණිතය", "description": "Mathematics subjects"},
    {"name": "Commerce", "name_si": "වාණිජ්‍යය", "description": "Commerce subjects"},
]

# "category" is an index into SAMPLE_CATEGORIES.
SAMPLE_SUBJECTS: list[dict[str, object]] = [
    {"name": "Physics", "name_si": "භෞතික විද්‍යාව", "description": "Advanced Level Physics", "category": 0},
    {"name": "Chemistry", "name_si": "රසායන විද්‍යාව", "description": "Advanced Level Chemistry", "category": 0},
    {"name": "Combined Mathematics", "name_si": "සංයුක්ත ගණිතය", "description": "Advanced Level Combined Mathematics", "category": 1},
    {"name": "Accounting", "name_si": "ගිණුම්කරණය", "description": "Advanced Level Accounting", "category": 2},
]

# "subject" is an index into SAMPLE_SUBJECTS.
SAMPLE_NOTES: list[dict[str, object]] = [
    {
        "title": "Newton's Laws of Motion",
        "subject": 0,
        "difficulty": "medium",
        "tags": ["mechanics", "forces"],
        "pages": [
            "# Newton's Laws of Motion\n\n**First law:** a body stays at rest or in uniform motion "
            "unless acted on by a resultant force.",
            "## Second law\n\nThe rate of change of momentum is proportional to the resultant force: "
            "$F = ma$.\n\n## Third law\n\nEvery action has an equal and opposite reaction.",
        ],
    },
    {
        "title": "Atomic Structure",
        "subject": 1,
        "difficulty": "easy",
        "tags": ["atoms", "electrons"],
        "pages": [
            "# Atomic Structure\n\nAn atom has a nucleus of *protons* and *neutrons* surrounded by electrons.\n\n"
            "1. Protons carry a positive charge\n2. Electrons carry a negative charge\n3. Neutrons are neutral",
        ],
    },
    {
        "title": "Differentiation Basics",
        "subject": 2,
        "difficulty": "hard",
        "tags": ["calculus"],
        "pages": [
            "# Differentiation\n\nThe derivative of $x^n$ is $nx^{n-1}$.\n\nThe derivative of a constant is zero.",
        ],
    },
]

# "note" is an index into SAMPLE_NOTES; the subject follows the note.
SAMPLE_QUESTIONS: list[dict[str, object]] = [
    {
        "question": "What is the SI unit of force?",
        "options": ["Joule", "Newton", "Watt", "Pascal"],
        "correct": 1,
        "explanation": "One newton accelerates one kilogram at one metre per second squared.",
        "note": 0,
        "difficulty": "easy",
    },
    {
        "question": "Which law states that every action has an equal and opposite reaction?",
        "options": ["First law", "Second law", "Third law", "Law of gravitation"],
        "correct": 2,
        "explanation": "This is Newton's third law.",
        "note": 0,
        "difficulty": "easy",
    },
    {
        "question": "Which particle carries a negative charge?",
        "options": ["Proton", "Neutron", "Electron", "Nucleus"],
        "correct": 2,
        "explanation": "Electrons are negatively charged.",
        "note": 1,
        "difficulty": "easy",
    },
    {
        "question": "What is the derivative of $x^3$?",
        "options": ["$x^2$", "$3x^2$", "$3x$", "$x^4/4$"],
        "correct": 1,
        "explanation": "Apply $nx^{n-1}$ with $n = 3$.",
        "note": 2,
        "difficulty": "medium",
    },
]
