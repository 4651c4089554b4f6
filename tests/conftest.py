import numpy as np
import pytest

from knowledge_base import KnowledgeBase


class ScriptedRng:
    """依序回傳預先指定的銅錢面（1 = 陰面）."""

    def __init__(self, faces):
        self._faces = iter(faces)

    def integers(self, low, high, size):
        return np.array([next(self._faces) for _ in range(size)])


@pytest.fixture(scope="session")
def kb():
    return KnowledgeBase.from_builtin(script="simplified")


@pytest.fixture
def scripted_rng():
    return ScriptedRng
