from dataclasses import dataclass, field
from pathlib import Path

from config import LANDMARKER_PATH


@dataclass
class ModelRegistry:
    landmarker_path: Path = field(default_factory=lambda: LANDMARKER_PATH)
