"""Shared test fixtures."""

from __future__ import annotations

import pytest

from drawsynth.models.synthesis import SynthesisOutput, SynthesisRequest


# Three-node flowchart, laid out in one column with equal 80px gaps

FLOWCHART_ITEMS = [
    {"shape": "ellipse", "x": 250, "y": 50, "w": 120, "h": 60, "label": "Start"},
    {"shape": "diamond", "x": 235, "y": 190, "w": 150, "h": 120, "label": "Decision?"},
    {"shape": "ellipse", "x": 250, "y": 390, "w": 120, "h": 60, "label": "End"},
    {"shape": "arrow", "fromLabel": "Start", "toLabel": "Decision?"},
    {"shape": "arrow", "fromLabel": "Decision?", "toLabel": "End"},
]

# Same flowchart with the decision pushed up into the start terminal
OVERLAPPING_FLOWCHART_ITEMS = [
    {"shape": "ellipse", "x": 250, "y": 50, "w": 120, "h": 60, "label": "Start"},
    {"shape": "diamond", "x": 235, "y": 100, "w": 150, "h": 120, "label": "Decision?"},
    {"shape": "ellipse", "x": 250, "y": 390, "w": 120, "h": 60, "label": "End"},
    {"shape": "arrow", "fromLabel": "Start", "toLabel": "Decision?"},
    {"shape": "arrow", "fromLabel": "Decision?", "toLabel": "End"},
]

# Two boxes joined by an explicit-point arrow that touches both edges
POINT_ARROW_ITEMS = [
    {"shape": "rectangle", "x": 100, "y": 100, "w": 120, "h": 80, "label": "API"},
    {"shape": "rectangle", "x": 400, "y": 100, "w": 120, "h": 80, "label": "DB"},
    {"shape": "arrow", "start": {"x": 220, "y": 140}, "end": {"x": 400, "y": 140}},
]

CAR_ITEMS = [
    {"shape": "rectangle", "x": 100, "y": 100, "w": 300, "h": 120, "fillColor": "red", "color": "red"},
    {"shape": "ellipse", "x": 140, "y": 200, "w": 80, "h": 80, "fillColor": "black"},
    {"shape": "ellipse", "x": 280, "y": 200, "w": 80, "h": 80, "fillColor": "black"},
]


class StubSynthesizer:
    """Replays scripted outputs; the last one repeats once the script runs out."""

    def __init__(self, *outputs: SynthesisOutput) -> None:
        self.outputs = list(outputs)
        self.requests: list[SynthesisRequest] = []

    async def synthesize(self, request: SynthesisRequest) -> SynthesisOutput:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.outputs) - 1)
        return self.outputs[index]


class FailingSynthesizer:
    def __init__(self, message: str = "model unavailable") -> None:
        self.message = message
        self.calls = 0

    async def synthesize(self, request: SynthesisRequest) -> SynthesisOutput:
        self.calls += 1
        raise RuntimeError(self.message)


def structured(items: list[dict], description: str = "") -> SynthesisOutput:
    return SynthesisOutput(items=items, diagram_type="structured", description=description)


@pytest.fixture
def flowchart_items() -> list[dict]:
    return [dict(item) for item in FLOWCHART_ITEMS]


@pytest.fixture
def car_items() -> list[dict]:
    return [dict(item) for item in CAR_ITEMS]
