# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Contract points shared between generated artifacts and the runtime that hosts them.

Fragments receive these values through the render context, the consistency
checker uses them as the expected side of every comparison.
"""
from __future__ import annotations

from dataclasses import dataclass

PORT_ENV_VAR = "SAGEMAKER_BIND_TO_PORT"
DEFAULT_PORT = 8080
MODEL_DIR = "/opt/ml/model"
MODEL_STEM = "abalone_model"
DEFAULT_LLM_MODEL = "openai/gpt-oss-20b"

HEALTH_ROUTE = "/ping"
INFERENCE_ROUTE = "/invocations"
ERROR_STATUSES = frozenset({400, 500, 503})


@dataclass(frozen=True)
class FormatSpec:
    """
    How one serialization format is written and read back.

    save_calls / load_calls are trailing dotted names; a call matches when its
    dotted name ends with one of them (e.g. `model.save_model` matches
    `save_model`).
    """

    extension: str | None
    save_calls: tuple[str, ...]
    load_calls: tuple[str, ...]

    @property
    def filename(self) -> str:
        if self.extension is None:
            return MODEL_STEM
        return f"{MODEL_STEM}.{self.extension}"


FORMATS: dict[str, FormatSpec] = {
    "joblib": FormatSpec("joblib", ("joblib.dump",), ("joblib.load",)),
    "pkl": FormatSpec("pkl", ("pickle.dump",), ("pickle.load",)),
    "json": FormatSpec("json", ("save_model",), ("load_model",)),
    "model": FormatSpec("model", ("save_model",), ("load_model",)),
    "ubj": FormatSpec("ubj", ("save_model",), ("load_model",)),
    "keras": FormatSpec("keras", ("save",), ("keras.models.load_model",)),
    "h5": FormatSpec("h5", ("save",), ("keras.models.load_model",)),
    # SavedModel is a directory written by `export`, read through its serving signature
    "SavedModel": FormatSpec(None, ("export",), ("saved_model.load",)),
}


@dataclass(frozen=True)
class ServerIdiom:
    """
    Request/response idiom a server framework expects from its routes.

    style: 'status_tuple' routes are plain functions returning (body, status);
        'http_exception' routes are coroutines raising HTTPException.
    """

    is_async: bool
    style: str
    health_decorators: tuple[str, ...]
    inference_decorators: tuple[str, ...]


SERVER_IDIOMS: dict[str, ServerIdiom] = {
    "flask": ServerIdiom(False, "status_tuple", ("route",), ("route",)),
    "fastapi": ServerIdiom(True, "http_exception", ("get",), ("post",)),
    "sglang": ServerIdiom(True, "http_exception", ("get",), ("post",)),
}


def render_context(config) -> dict:
    """Values every fragment may reference."""
    return {
        "port_env": PORT_ENV_VAR,
        "default_port": DEFAULT_PORT,
        "model_dir": MODEL_DIR,
        "model_id": config.model,
        "framework": config.framework,
        "model_server": config.model_server,
        "model_format": config.model_format,
    }
