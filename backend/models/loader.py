from pathlib import Path

from config import LANDMARKER_PATH
from errors import InitializationError
from models.registry import ModelRegistry


def load_all_models(landmarker_path: Path = LANDMARKER_PATH) -> ModelRegistry:
    """Check the model assets once at startup. Landmarkers themselves are created per session."""
    path = Path(landmarker_path)
    if not path.is_file():
        raise InitializationError(f"Face landmarker model not found at {path}")

    print(f"Found face landmarker: {path.name}")
    return ModelRegistry(landmarker_path=path)
