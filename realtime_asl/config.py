"""Application configuration constants."""

WINDOW_SIZE: int = 10
INPUT_SIZE: tuple[int, int] = (299, 299)
MODEL_PATH: str = "assets/asl_model.tflite"
LABELS_PATH: str = "assets/asl_labels.txt"
FRAME_QUEUE_SIZE: int = 1
EMPTY_LABEL: str = "–"
WINDOW_NAME: str = "Realtime ASL"
DEBUG_DRAW: bool = True
MIRROR_PREVIEW: bool = True
SPEAK_COOLDOWN_S: float = 1.5
ANNOUNCE_MIN_CONF: float = 0.6
