from typing import List

# tailwind gradient classes the dashboard frontend renders avatars with
AVATAR_GRADIENTS: List[str] = [
    "from-indigo-500 to-purple-500",
    "from-rose-400 to-orange-400",
    "from-emerald-400 to-teal-500",
    "from-yellow-400 to-red-400",
    "from-sky-400 to-indigo-600",
]


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def name_hash(name: str) -> int:
    """Rolling `h = (h << 5) - h + code` hash with javascript integer semantics.

    The shift truncates to a signed 32 bit int, the subtraction and addition
    do not, and the input is walked in UTF-16 code units. This keeps the
    colour a name gets identical to the one the web dashboard computes.
    """
    encoded = name.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = _to_int32(_to_int32(h) << 5) - h + code_unit
    return h


def name_to_gradient(name: str = "") -> str:
    if not name:
        return AVATAR_GRADIENTS[0]
    return AVATAR_GRADIENTS[abs(name_hash(name)) % len(AVATAR_GRADIENTS)]
