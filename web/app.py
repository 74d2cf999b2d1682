from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import Optional

from flask import Flask, current_app, jsonify, request
from pydantic import ValidationError

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from core.config import Settings, configure_logging, get_settings
from core.errors import InvalidSubmissionError, MathPracticeError
from core.practice_service import PracticeService
from core.progress_store import InMemoryProgressStore, JsonProgressStore
from generators.question_generator import QuestionGenerator
from schemas.practice import (
    AnswerRequest,
    AnswerResponse,
    MicroTokenRequest,
    NextQuestionQuery,
    QuestionPayload,
    RushAssessmentRequest,
    SessionCompleteRequest,
    SessionCompleteResponse,
    TokenBalanceResponse,
)

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-Id"
ANONYMOUS_USER = "anonymous"

# URL module names -> internal module keys
MODULE_ALIASES = {
    "math-facts": "math_facts",
    "math_facts": "math_facts",
    "math-rush": "math_rush",
    "math_rush": "math_rush",
    "ratios": "ratios",
    "fractions": "fractions",
    "decimals": "decimals",
    "decimal-defender": "decimals",
}


def build_store(settings: Settings) -> InMemoryProgressStore:
    if settings.store_path:
        return JsonProgressStore(settings.store_path, default_grade=settings.default_grade)
    return InMemoryProgressStore(default_grade=settings.default_grade)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[PracticeService] = None,
) -> Flask:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if service is None:
        generator = QuestionGenerator(
            seed=settings.question_seed,
            max_attempts=settings.max_generation_attempts,
        )
        service = PracticeService(build_store(settings), generator=generator)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.extensions["practice_service"] = service

    register_error_handlers(app)
    register_routes(app)
    return app


# --------------------------------------------------------------------------- #
# Request helpers
# --------------------------------------------------------------------------- #

def current_service() -> PracticeService:
    return current_app.extensions["practice_service"]


def current_user_id() -> str:
    return request.headers.get(USER_HEADER, "").strip() or ANONYMOUS_USER


def token_balance_response(balance: int):
    settings: Settings = current_app.config["SETTINGS"]
    return jsonify(
        TokenBalanceResponse(
            tokens=balance, poll_interval_sec=settings.token_poll_interval_sec
        ).model_dump()
    )


def resolve_module(name: str) -> str:
    module = MODULE_ALIASES.get(name)
    if module is None:
        raise InvalidSubmissionError(f"Unknown module: {name}")
    return module


def parse_body(model):
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidSubmissionError("Request body must be JSON.")
    return model.model_validate(data)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(MathPracticeError)
    def handle_practice_error(exc: MathPracticeError):
        logger.info("%s %s -> %s: %s", request.method, request.path, exc.status_code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        first = exc.errors()[0] if exc.errors() else {"msg": str(exc)}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first['msg']}" if location else first["msg"]
        return jsonify({"error": message}), 400

    @app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({"error": "Not found"}), 404


# --------------------------------------------------------------------------- #
# Routes
# --------------------------------------------------------------------------- #

def register_routes(app: Flask) -> None:
    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/questions/next", methods=["GET"])
    def next_question():
        query = NextQuestionQuery(
            module=resolve_module(request.args.get("module", "")),
            skill=request.args.get("skill", ""),
            level=request.args.get("level") or None,
            step=request.args.get("step") or None,
            exclude=request.args.get("exclude"),
            force_dynamic=request.args.get("forceDynamic", "false").lower() in ("1", "true", "yes"),
        )
        question = current_service().next_question(
            current_user_id(),
            query.module,
            query.skill,
            query.level,
            step=query.step,
            exclude=query.exclude,
            force_dynamic=query.force_dynamic,
        )
        payload = QuestionPayload(**question.to_dict(include_answer=False))
        return jsonify(payload.model_dump())

    @app.route("/api/answer", methods=["POST"])
    def submit_answer():
        body = parse_body(AnswerRequest)
        service = current_service()
        user_id = current_user_id()
        result = service.submit_answer(user_id, body.question_id, body.answer)
        response = AnswerResponse(
            question_id=body.question_id,
            correct=result.correct,
            correct_answer=result.details["correct_answer"],
            message=result.message,
            tokens=service.token_balance(user_id),
        )
        return jsonify(response.model_dump())

    @app.route("/api/<module>/complete", methods=["POST"])
    def complete_session(module: str):
        body = parse_body(SessionCompleteRequest)
        outcome = current_service().complete_session(
            current_user_id(),
            resolve_module(module),
            body.correct,
            body.total,
            duration_sec=body.duration_sec,
            skill=body.skill,
            step=body.step,
        )
        return jsonify(SessionCompleteResponse(**outcome).model_dump())

    @app.route("/api/recommendations", methods=["GET"])
    def recommendations():
        rec = current_service().recommendations(current_user_id())
        return jsonify(
            {
                "suggested_categories": rec.suggested_categories,
                "weak_modules": rec.weak_modules,
                "concepts_to_learn": rec.concepts_to_learn,
                "difficulty_level": rec.difficulty_level,
                "next_rush_steps": rec.next_rush_steps,
                "correct_rate": rec.correct_rate,
            }
        )

    @app.route("/api/math-rush/<operator>/progression", methods=["GET"])
    def rush_progression(operator: str):
        return jsonify(current_service().rush_progression(current_user_id(), operator))

    @app.route("/api/math-rush/<operator>/assessment", methods=["POST"])
    def rush_assessment(operator: str):
        body = parse_body(RushAssessmentRequest)
        answers = [record.model_dump() for record in body.answers]
        return jsonify(current_service().rush_assessment(current_user_id(), operator, answers))

    @app.route("/api/tokens", methods=["GET"])
    def token_balance():
        balance = current_service().token_balance(current_user_id())
        return token_balance_response(balance)

    @app.route("/api/tokens/micro", methods=["POST"])
    def micro_tokens():
        body = parse_body(MicroTokenRequest)
        if body.amount is None and body.correct is None:
            raise InvalidSubmissionError("Provide either 'amount' or 'correct'.")
        balance = current_service().add_micro_tokens(
            current_user_id(), amount=body.amount, correct=body.correct
        )
        return token_balance_response(balance)


if __name__ == "__main__":
    settings = get_settings()
    create_app(settings).run(debug=settings.debug, port=5000)
