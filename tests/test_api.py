import pytest

from core.config import Settings
from core.progression import get_progression_for_operator
from generators.ratios import format_ratio, is_equivalent_ratio
from web.app import create_app

KID = {"X-User-Id": "kid"}


def _next(client, headers=KID, **params):
    response = client.get("/api/questions/next", query_string=params, headers=headers)
    assert response.status_code == 200, response.get_json()
    return response.get_json()


def test_health(client) -> None:
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_next_question_hides_the_answer(client) -> None:
    question = _next(client, module="math-facts", skill="addition")
    assert question["module"] == "math_facts"
    assert question["level"] == 3
    assert "correct_answer" not in question
    assert "correct_options" not in question
    assert len(question["options"]) == 4


def test_multi_select_flag(client) -> None:
    question = _next(client, module="ratios", skill="equivalents", level=3)
    assert question["multi_select"] is True
    assert len(question["options"]) == 5


def test_multi_select_answer_as_json_list(client) -> None:
    for picks_wrong in (False, True):
        question = _next(client, module="ratios", skill="equivalents", level=3)
        base_a, base_b = (int(part) for part in question["payload"]["base_ratio"].split(":"))
        right, wrong = [], []
        for option in question["options"]:
            x, y = (int(part) for part in option.split(":"))
            (right if is_equivalent_ratio(base_a, base_b, x, y) else wrong).append(option)

        picks = right[:1] + wrong[:1] if picks_wrong else right
        response = client.post("/api/answer", json={"question_id": question["id"], "answer": picks}, headers=KID)
        assert response.status_code == 200
        assert response.get_json()["correct"] is not picks_wrong


def test_answer_is_graded_once(client) -> None:
    question = _next(client, module="ratios", skill="write_form", level=1)
    payload = question["payload"]
    answer = format_ratio(payload["a"], payload["b"], payload["requested_format"])

    response = client.post("/api/answer", json={"question_id": question["id"], "answer": answer}, headers=KID)
    body = response.get_json()
    assert response.status_code == 200
    assert body["correct"] is True
    assert body["tokens"] == 0

    again = client.post("/api/answer", json={"question_id": question["id"], "answer": answer}, headers=KID)
    assert again.status_code == 404
    assert "not found" in again.get_json()["error"]


def test_questions_are_per_user(client) -> None:
    question = _next(client, module="decimals", skill="comparing")
    response = client.post(
        "/api/answer",
        json={"question_id": question["id"], "answer": ">"},
        headers={"X-User-Id": "someone-else"},
    )
    assert response.status_code == 404


def test_wrong_answer_reveals_correct_answer(client) -> None:
    question = _next(client, module="decimals", skill="comparing")
    response = client.post("/api/answer", json={"question_id": question["id"], "answer": "="}, headers=KID)
    body = response.get_json()
    assert body["correct"] is False
    assert body["correct_answer"] in (">", "<")


def test_exclusion_and_force_dynamic(client) -> None:
    first = _next(client, module="math_facts", skill="multiplication", level=4)
    second = _next(
        client,
        module="math_facts",
        skill="multiplication",
        level=4,
        exclude=first["id"],
        forceDynamic="true",
    )
    assert second["id"] != first["id"]


def test_unknown_module_and_skill(client) -> None:
    response = client.get("/api/questions/next", query_string={"module": "geometry", "skill": "area"})
    assert response.status_code == 400
    assert "geometry" in response.get_json()["error"]

    response = client.get("/api/questions/next", query_string={"module": "ratios", "skill": "area"})
    assert response.status_code == 400


def test_bad_bodies_are_rejected(client) -> None:
    response = client.post("/api/answer", data="not json", headers=KID)
    assert response.status_code == 400

    response = client.post("/api/math-facts/complete", json={"correct": 5, "total": 4}, headers=KID)
    assert response.status_code == 400
    assert "correct cannot exceed total" in response.get_json()["error"]

    response = client.post("/api/tokens/micro", json={}, headers=KID)
    assert response.status_code == 400

    assert client.get("/api/nowhere").status_code == 404


def test_math_facts_streak_moves_grade(client) -> None:
    body = {"correct": 6, "total": 6, "skill": "addition"}
    outcomes = [client.post("/api/math-facts/complete", json=body, headers=KID).get_json() for _ in range(4)]

    assert outcomes[0]["tokens_earned"] == 10
    assert outcomes[0]["grade_change"] is None
    assert outcomes[3]["grade_change"] == "up"
    assert outcomes[3]["grade_level"] == "4"
    assert outcomes[3]["tokens"] == 40

    question = _next(client, module="math_facts", skill="addition")
    assert question["level"] == 4


def test_fractions_session_tokens(client) -> None:
    response = client.post("/api/fractions/complete", json={"correct": 20, "total": 20}, headers=KID)
    body = response.get_json()
    assert body["tokens_earned"] == 32
    assert body["perfect"] is True
    assert body["tokens"] == 32


def test_rush_session_completes_step(client) -> None:
    body = {"correct": 10, "total": 10, "duration_sec": 45, "skill": "addition", "step": "Adding 2"}
    outcome = client.post("/api/math-rush/complete", json=body, headers=KID).get_json()
    assert outcome["tokens_earned"] == 26
    assert outcome["completed_types"] == ["Adding 2"]
    assert outcome["mastery"] is False

    progression = client.get("/api/math-rush/addition/progression", headers=KID).get_json()
    assert progression["completed_types"] == ["Adding 2"]
    assert progression["next_type"] == "Adding 0 and 1"
    assert progression["test_taken"] is False

    bad = dict(body, step="Divide by 2")
    assert client.post("/api/math-rush/complete", json=bad, headers=KID).status_code == 400


def test_failed_rush_session_does_not_complete_step(client) -> None:
    body = {"correct": 3, "total": 10, "duration_sec": 90, "skill": "division", "step": "Divide by 3"}
    outcome = client.post("/api/math-rush/complete", json=body, headers=KID).get_json()
    assert outcome["completed_types"] == []
    assert outcome["passed"] is False


def test_rush_assessment_mastery(client) -> None:
    answers = [
        {"type": step, "is_correct": True}
        for step in get_progression_for_operator("subtraction")
    ]
    outcome = client.post("/api/math-rush/subtraction/assessment", json={"answers": answers}, headers=KID).get_json()
    assert outcome["mastery"] is True
    assert outcome["tokens_earned"] == 50
    assert outcome["tokens"] == 50

    progression = client.get("/api/math-rush/subtraction/progression", headers=KID).get_json()
    assert progression["mastered"] is True
    assert progression["test_taken"] is True


def test_mixed_rush_question_for_a_step(client) -> None:
    for _ in range(10):
        question = _next(client, module="math_rush", skill="mixed", step="Adding 7")
        assert question["skill"] == "addition"
        assert question["payload"]["type"] == "Adding 7"

    question = _next(client, module="math_rush", skill="mixed")
    assert question["skill"] in ("addition", "subtraction", "multiplication", "division")

    response = client.get(
        "/api/questions/next",
        query_string={"module": "math_rush", "skill": "mixed", "step": "Adding 99"},
    )
    assert response.status_code == 400


@pytest.mark.parametrize(
    "module, level",
    [("ratios", 9), ("fractions", 0), ("fractions", 6), ("decimals", 2), ("decimals", 7)],
)
def test_out_of_range_level_is_a_bad_request(client, module: str, level: int) -> None:
    skill = {"ratios": "write_form", "fractions": "simplify", "decimals": "rounding"}[module]
    response = client.get(
        "/api/questions/next", query_string={"module": module, "skill": skill, "level": level}
    )
    assert response.status_code == 400
    assert "out of range" in response.get_json()["error"]


def test_rush_unknown_operator(client) -> None:
    response = client.get("/api/math-rush/exponents/progression", headers=KID)
    assert response.status_code == 400
    assert response.get_json() == {"error": "Unknown operator: exponents"}


def test_micro_tokens(client) -> None:
    assert client.post("/api/tokens/micro", json={"correct": 7}, headers=KID).get_json()["tokens"] == 2
    assert client.post("/api/tokens/micro", json={"amount": 5}, headers=KID).get_json()["tokens"] == 7
    assert client.get("/api/tokens", headers=KID).get_json() == {"tokens": 7, "poll_interval_sec": 30}
    assert client.get("/api/tokens").get_json()["tokens"] == 0


def test_recommendations(client) -> None:
    client.post("/api/ratios/complete", json={"correct": 1, "total": 5}, headers=KID)
    body = client.get("/api/recommendations", headers=KID).get_json()
    assert body["weak_modules"] == ["ratios"]
    assert body["suggested_categories"] == ["ratios"]
    assert body["correct_rate"] == 0.2
    assert set(body["next_rush_steps"]) == {"addition", "subtraction", "multiplication", "division"}


def test_json_store_persists_between_apps(tmp_path) -> None:
    settings = Settings(_env_file=None, store_path=tmp_path / "users.json", log_level="WARNING")
    first = create_app(settings).test_client()
    first.post("/api/tokens/micro", json={"amount": 3}, headers=KID)

    second = create_app(settings).test_client()
    assert second.get("/api/tokens", headers=KID).get_json()["tokens"] == 3
