# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Artifact skeletons.

Each artifact is an ordered list of slots. A slot is either fixed text or a
reference to one section of the fragment selected by an axis value. The
`always` pseudo-axis selects the artifact's axis-independent fragment.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .inputs.schema import Configuration

ALWAYS = "always"


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class FragmentRef:
    axis: str
    section: str

    @classmethod
    def always(cls, section: str) -> "FragmentRef":
        return cls(ALWAYS, section)


Slot = Union[Text, FragmentRef]


def _always_applies(config: Configuration) -> bool:
    return True


@dataclass(frozen=True)
class ArtifactSpec:
    """
    A named output file.

    table: name of the fragment table (templates/<table>.yaml) feeding the slots.
    binds_port / serves_http / saves_model / loads_model / embeds_model_id
        declare which cross-artifact invariants apply to the rendered text.
    applies: whether the artifact is produced for a configuration.
    """

    name: str
    path: str
    table: str
    slots: tuple[Slot, ...]
    binds_port: bool = False
    serves_http: bool = False
    saves_model: bool = False
    loads_model: bool = False
    embeds_model_id: bool = False
    applies: Callable[[Configuration], bool] = _always_applies

    @property
    def axes(self) -> tuple[str, ...]:
        """Axes referenced by fragment slots, in first-use order."""
        seen: list[str] = []
        for slot in self.slots:
            if isinstance(slot, FragmentRef) and slot.axis not in seen:
                seen.append(slot.axis)
        return tuple(seen)


def _tabular(config: Configuration) -> bool:
    return config.framework != "sglang"


def _sample_model(config: Configuration) -> bool:
    return _tabular(config) and config.include_sample_model


def _testing(config: Configuration) -> bool:
    return config.include_testing


_BLANK = Text("\n")
_GAP = Text("\n\n")
_ENTRYPOINT = Text("if __name__ == '__main__':\n    main()\n")

SERVE = ArtifactSpec(
    name="serve script",
    path="code/serve.py",
    table="serve",
    slots=(
        FragmentRef.always("header"),
        FragmentRef("modelServer", "imports"),
        _BLANK,
        FragmentRef.always("logging"),
        _BLANK,
        FragmentRef("modelServer", "app"),
        _GAP,
        FragmentRef("modelServer", "main"),
        _GAP,
        _ENTRYPOINT,
    ),
    binds_port=True,
    serves_http=True,
    embeds_model_id=True,
)

START = ArtifactSpec(
    name="start script",
    path="code/start_server.py",
    table="start_server",
    slots=(
        FragmentRef.always("header"),
        _GAP,
        FragmentRef.always("signals"),
        _GAP,
        FragmentRef("modelServer", "launch"),
        _GAP,
        _ENTRYPOINT,
    ),
    binds_port=True,
)

MODEL_HANDLER = ArtifactSpec(
    name="model handler",
    path="code/model_handler.py",
    table="model_handler",
    slots=(
        FragmentRef.always("header"),
        FragmentRef("framework", "imports"),
        FragmentRef("modelFormat", "imports"),
        _BLANK,
        FragmentRef.always("logging"),
        _GAP,
        FragmentRef("modelFormat", "load"),
        FragmentRef("modelFormat", "predict"),
        FragmentRef.always("input"),
        FragmentRef.always("class"),
    ),
    loads_model=True,
    applies=_tabular,
)

TRAINING = ArtifactSpec(
    name="training script",
    path="sample_model/train_abalone.py",
    table="train_abalone",
    slots=(
        FragmentRef.always("header"),
        FragmentRef("framework", "imports"),
        FragmentRef("modelFormat", "imports"),
        _BLANK,
        FragmentRef("framework", "split"),
        _BLANK,
        FragmentRef.always("data"),
        _BLANK,
        FragmentRef("framework", "train"),
        _BLANK,
        Text("# Save model\n"),
        FragmentRef("modelFormat", "save"),
        _BLANK,
        Text('print("Model saved.")\n'),
    ),
    saves_model=True,
    applies=_sample_model,
)

SAMPLE_INFERENCE = ArtifactSpec(
    name="sample inference",
    path="sample_model/test_inference.py",
    table="test_inference",
    slots=(
        FragmentRef.always("header"),
        FragmentRef("framework", "imports"),
        FragmentRef("modelFormat", "imports"),
        _BLANK,
        Text("# Load the trained model\n"),
        FragmentRef("modelFormat", "load"),
        _BLANK,
        FragmentRef.always("input"),
        _BLANK,
        Text("# Make prediction\n"),
        FragmentRef("modelFormat", "predict"),
    ),
    loads_model=True,
    applies=_sample_model,
)

TEST_HARNESS = ArtifactSpec(
    name="test harness",
    path="test/test_model_handler.py",
    table="test_model_handler",
    slots=(
        FragmentRef("framework", "docstring"),
        FragmentRef.always("imports"),
        FragmentRef("framework", "imports"),
        FragmentRef("modelFormat", "imports"),
        _GAP,
        FragmentRef("modelFormat", "load"),
        FragmentRef("modelFormat", "predict"),
        FragmentRef("framework", "usage"),
        FragmentRef("framework", "main"),
        _ENTRYPOINT,
    ),
    loads_model=True,
    embeds_model_id=True,
    applies=_testing,
)

ARTIFACTS: tuple[ArtifactSpec, ...] = (SERVE, START, MODEL_HANDLER, TRAINING, SAMPLE_INFERENCE, TEST_HARNESS)

ARTIFACT_PATHS: dict[str, str] = {a.name: a.path for a in ARTIFACTS}


def get_artifact(name: str) -> ArtifactSpec:
    for spec in ARTIFACTS:
        if spec.name == name:
            return spec
    raise KeyError(f"Unknown artifact '{name}'. Available: {list(ARTIFACT_PATHS)}")


def applicable_artifacts(config: Configuration) -> list[ArtifactSpec]:
    return [spec for spec in ARTIFACTS if spec.applies(config)]
