#!/usr/bin/env python3
"""
Flask REST API for the action mapper.

Uses environment variables for configuration (see config_loader).
The mapper is initialized lazily on the first request that needs it.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request

sys.path.insert(0, str(Path(__file__).parent / "src"))

# Public API imports
from action_mapper.app import ActionMapperApp
from action_mapper.config_loader import load_config_from_env
from action_mapper.exceptions import ActionMapperError, EmptyScenarioError
from action_mapper.navigation import NavigationOptions
from action_mapper.orchestration import PipelineOptions
from action_mapper.security import StepValidator, ValidationError

app = Flask(__name__)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

mapper_app: Optional[ActionMapperApp] = None


def _get_mapper() -> Optional[ActionMapperApp]:
    """Initialize the mapper from environment variables on first use."""
    global mapper_app

    if mapper_app is not None:
        return mapper_app

    try:
        candidate = ActionMapperApp(load_config_from_env())
        candidate.initialize()
        mapper_app = candidate
        logger.info("Action mapper initialized from environment variables")
    except Exception as e:
        logger.error(f"Failed to initialize action mapper: {str(e)}", exc_info=True)
    return mapper_app


def _optional_number(data: dict, key: str, cast):
    value = data.get(key)
    if value is None:
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number")


@app.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "initialized": mapper_app is not None})


@app.route("/api/map-steps", methods=["POST"])
def map_steps():
    """Map a scenario of steps to page-object methods."""
    mapper = _get_mapper()
    if mapper is None:
        return jsonify({"error": "Action mapper not initialized. Please check configuration."}), 500

    data = request.get_json(silent=True) or {}
    try:
        steps = StepValidator.validate_steps(data.get("steps"))
        options = PipelineOptions(
            platform=data.get("platform"),
            brand=data.get("brand"),
            include_login=bool(data.get("includeLogin", True)),
            target_screen=data.get("targetScreen"),
            full_scenario=StepValidator.validate_scenario(data.get("scenario")),
            build_prerequisites=bool(data.get("buildPrerequisites", True)),
            playback_seconds=_optional_number(data, "playbackSeconds", float),
            seek_ratio=_optional_number(data, "seekRatio", float),
            fast_seek_seconds=_optional_number(data, "fastSeekSeconds", int),
        )
    except ValidationError as e:
        logger.warning(f"Step validation failed: {str(e)}")
        return jsonify({"error": str(e)}), 400

    try:
        report = mapper.map_steps(steps, options)
    except EmptyScenarioError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Map steps endpoint error: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify({"success": True, **report.to_dict()})


@app.route("/api/navigation/plan", methods=["POST"])
def navigation_plan():
    """
    Prerequisite plan for a target screen.

    With "from" and "to", the shortest screen path is returned as well.
    """
    mapper = _get_mapper()
    if mapper is None:
        return jsonify({"error": "Action mapper not initialized. Please check configuration."}), 500

    data = request.get_json(silent=True) or {}
    try:
        options = NavigationOptions(
            platform=data.get("platform"),
            brand=data.get("brand"),
            include_login=bool(data.get("includeLogin", True)),
            target_screen=data.get("targetScreen") or data.get("to"),
            playback_seconds=_optional_number(data, "playbackSeconds", float),
            seek_ratio=_optional_number(data, "seekRatio", float),
            fast_seek_seconds=_optional_number(data, "fastSeekSeconds", int),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    result = {"success": True, **mapper.plan_navigation((), options).to_dict()}
    if data.get("from") and data.get("to"):
        result["path"] = mapper.shortest_path(data["from"], data["to"])
    return jsonify(result)


@app.route("/api/knowledge-base/stats", methods=["GET"])
def knowledge_base_stats():
    mapper = _get_mapper()
    if mapper is None:
        return jsonify({"error": "Action mapper not initialized. Please check configuration."}), 500
    return jsonify({"success": True, "stats": mapper.get_stats()})


@app.route("/api/knowledge-base/terminology", methods=["POST"])
def learn_terminology():
    """Teach the knowledge base a user phrase and what it expands to."""
    mapper = _get_mapper()
    if mapper is None:
        return jsonify({"error": "Action mapper not initialized. Please check configuration."}), 500

    data = request.get_json(silent=True) or {}
    expands_to = data.get("expandsTo")
    if isinstance(expands_to, str):
        expands_to = [expands_to]

    try:
        user_term = StepValidator.clean_text(data.get("userTerm"), 200, "userTerm", required=True)
        if not expands_to or not all(isinstance(e, str) and e.strip() for e in expands_to):
            raise ValidationError("expandsTo must be a non-empty string or list of strings")
        term = mapper.learn_terminology(
            user_term,
            [e.strip() for e in expands_to],
            context=data.get("context") or "",
            synonyms=data.get("synonyms") or [],
        )
    except (ValidationError, ValueError) as e:
        return jsonify({"error": str(e)}), 400
    except ActionMapperError as e:
        logger.error(f"Terminology endpoint error: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify({"success": True, "term": term.to_dict()}), 201


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=7860, debug=False)
