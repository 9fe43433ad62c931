from jobboard.services.scoring import coerce_skills, score_skills, skill_overlap


def test_empty_requirements_score_zero():
    assert score_skills(["Python", "SQL"], []) == 0
    assert score_skills(["Python"], None) == 0
    assert score_skills([], []) == 0


def test_candidate_with_every_required_skill_scores_full():
    required = ["Python", "FastAPI", "PostgreSQL"]
    assert score_skills(required + ["Docker"], required) == 100


def test_containment_works_in_both_directions():
    assert score_skills(["java"], ["javascript"]) == 100
    assert score_skills(["javascript"], ["java"]) == 100


def test_matching_ignores_case():
    assert score_skills(["PYTHON"], ["python"]) == 100


def test_three_of_four_required_skills():
    candidate = ["JavaScript", "React", "Node.js", "SQL"]
    required = ["JavaScript", "React", "Node.js", "Database Design"]
    assert score_skills(candidate, required) == 75


def test_no_candidate_skills_scores_zero():
    assert score_skills([], ["Python"]) == 0


def test_each_required_skill_counts_once():
    # Several candidate skills satisfying one requirement still count once.
    assert score_skills(["react", "react native", "reactive"], ["react", "go"]) == 50
    # Duplicated requirements are kept and each is scored.
    assert score_skills(["python"], ["python", "python", "rust"]) == 67


def test_half_percentages_round_up():
    required = ["a1", "b2", "c3", "d4", "e5", "f6", "g7", "h8"]
    assert score_skills(["a1"], required) == 13


def test_score_is_always_an_int_within_bounds():
    cases = [
        (["x"], ["x", "y", "z"]),
        (["kubernetes", "go"], ["k8s"]),
        (["", "  "], ["python"]),
        (["python"] * 50, ["python"]),
        ([str(n) for n in range(30)], [str(n) for n in range(100, 130)]),
    ]
    for candidate, required in cases:
        score = score_skills(candidate, required)
        assert isinstance(score, int)
        assert 0 <= score <= 100


def test_coerce_skills_accepts_nested_and_malformed_values():
    assert coerce_skills({"skills": ["Python", " SQL ", ""]}) == ["Python", "SQL"]
    assert coerce_skills(["Go", 3, None, "Rust"]) == ["Go", "Rust"]
    assert coerce_skills("Python, SQL") == []
    assert coerce_skills(None) == []
    assert coerce_skills(42) == []


def test_malformed_input_scores_zero_instead_of_failing():
    assert score_skills({"unexpected": True}, ["Python"]) == 0
    assert score_skills(["Python"], "Python") == 0


def test_skill_overlap_splits_required_skills():
    matched, missing = skill_overlap(
        ["JavaScript", "React", "Node.js", "SQL"],
        ["JavaScript", "React", "Node.js", "Database Design"],
    )
    assert matched == ["JavaScript", "React", "Node.js"]
    assert missing == ["Database Design"]
