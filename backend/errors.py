class LivenessError(Exception):
    """Base class for errors raised by the liveness backend."""


class InitializationError(LivenessError):
    """The face landmarker could not be created (missing or broken model asset)."""


class DeviceError(LivenessError):
    """The camera could not be opened or stopped delivering frames at startup."""


class TransientDetectionGap(LivenessError):
    """A frame produced no usable face data. Never surfaced past the detector."""
