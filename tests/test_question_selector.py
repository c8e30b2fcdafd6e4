from __future__ import annotations

import random

from exam_notes.core.services.question_selector import select_questions


def test_selects_min_of_max_count_and_pool_without_duplicates(make_question):
    pool = [make_question(f"q{i}") for i in range(15)]

    chosen = select_questions(pool, max_count=10, rng=random.Random(1))
    assert len(chosen) == 10
    assert len({q.id for q in chosen}) == 10

    small = select_questions(pool[:3], max_count=10, rng=random.Random(1))
    assert sorted(q.id for q in small) == ["q0", "q1", "q2"]


def test_duplicate_ids_in_pool_are_dropped(make_question):
    pool = [make_question("q1"), make_question("q1"), make_question("q2")]

    chosen = select_questions(pool, rng=random.Random(3))

    assert sorted(q.id for q in chosen) == ["q1", "q2"]


def test_note_scope_takes_precedence_over_subject_scope(make_question):
    pool = [
        make_question("a", note_id="n1", subject_id="s1"),
        make_question("b", note_id="n2", subject_id="s1"),
        make_question("c", note_id="n3", subject_id="s2"),
    ]

    by_note = select_questions(pool, note_id="n2", subject_id="s2")
    by_subject = select_questions(pool, subject_id="s1")

    assert [q.id for q in by_note] == ["b"]
    assert sorted(q.id for q in by_subject) == ["a", "b"]


def test_empty_scope_and_non_positive_count_return_nothing(make_question):
    pool = [make_question("a", note_id="n1")]

    assert select_questions(pool, note_id="missing") == []
    assert select_questions([], max_count=5) == []
    assert select_questions(pool, max_count=0) == []


def test_same_seed_gives_same_order(make_question):
    pool = [make_question(f"q{i}") for i in range(8)]

    first = select_questions(pool, rng=random.Random(42))
    second = select_questions(pool, rng=random.Random(42))

    assert [q.id for q in first] == [q.id for q in second]


def test_assigned_questions_hidden_from_other_students(make_question):
    pool = [make_question("open"), make_question("private", assigned_students=["s-1"])]

    assert sorted(q.id for q in select_questions(pool, student_id="s-1")) == ["open", "private"]
    assert [q.id for q in select_questions(pool, student_id="s-2")] == ["open"]
