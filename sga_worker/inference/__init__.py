from sga_worker.inference.challenge_solver import ChallengeSolver
from sga_worker.inference.client_base import BaseInferenceClient
from sga_worker.inference.document_interpreter import DocumentInterpreter
from sga_worker.inference.factory import InferenceClientFactory

__all__ = [
    "BaseInferenceClient",
    "ChallengeSolver",
    "DocumentInterpreter",
    "InferenceClientFactory",
]
