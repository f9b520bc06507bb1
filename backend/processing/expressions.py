"""Map MediaPipe face blendshapes onto named expression confidences in [0, 1]."""


def _clamp(v: float) -> float:
    return max(0.0, min(1.0, v))


def _pair(bs: dict, name: str) -> float:
    return (bs.get(f"{name}Left", 0.0) + bs.get(f"{name}Right", 0.0)) / 2.0


def expressions_from_blendshapes(bs: dict[str, float]) -> dict[str, float]:
    if not bs:
        return {}

    smile = _pair(bs, "mouthSmile")
    happy = _clamp(smile)

    surprised = _clamp(
        bs.get("browInnerUp", 0.0) * 0.3
        + _pair(bs, "eyeWide") * 0.3
        + bs.get("jawOpen", 0.0) * 0.4
    )
    sad = _clamp(_pair(bs, "mouthFrown") * 0.6 + bs.get("browInnerUp", 0.0) * 0.4 * (1 - smile))
    angry = _clamp(_pair(bs, "browDown") * 0.5 + _pair(bs, "mouthPress") * 0.25 + _pair(bs, "noseSneer") * 0.25)

    expressions = {"happy": happy, "surprised": surprised, "sad": sad, "angry": angry}
    expressions["neutral"] = _clamp(1.0 - max(expressions.values()))
    return expressions
