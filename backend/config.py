import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

BASE_DIR = Path(__file__).resolve().parent

# Weights / model paths
LANDMARKER_PATH = BASE_DIR / os.getenv("LANDMARKER_PATH", "weights/face_landmarker.task")

# Eye contours (MediaPipe landmark indices)
# Order: corner, upper-outer, upper-inner, corner, lower-inner, lower-outer
LEFT_EYE = [362, 385, 387, 263, 373, 380]
RIGHT_EYE = [33, 160, 158, 133, 153, 144]

# Nose: bridge down to the tip, then the nostril base
NOSE = [168, 6, 197, 1, 98, 97, 2, 326, 327]
NOSE_TIP = 3

# Challenge thresholds
EXPRESSION_THRESHOLD = 0.9
EAR_THRESHOLD = 0.20
POSE_LEFT_MAX = 0.4
POSE_RIGHT_MIN = 0.6
POSE_UP_MAX = 0.4
POSE_DOWN_MIN = 0.6

# Sequencing
TICK_INTERVAL_MS = int(os.getenv("TICK_INTERVAL_MS", "500"))
REARM_DELAY_MS = int(os.getenv("REARM_DELAY_MS", "1000"))
CHALLENGE_TIMEOUT_S = float(os.getenv("CHALLENGE_TIMEOUT_S", "0"))  # 0 = wait indefinitely; also runs on ticks with no frame
COMPLETION_MESSAGE = "All done!"
TIMEOUT_MESSAGE = "Challenge timed out, please try again"

# Camera
CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))

# Server
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
