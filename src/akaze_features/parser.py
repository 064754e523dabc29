"""
Command line parsing for the AKAZE feature extraction driver

The parser is a small state machine over the raw argument list: the first
token is the image path, every following token is looked up in a fixed flag
table, and value-taking flags consume exactly the next token. Numbers are
converted with C ``atof``/``atoi`` semantics, so malformed numeric text turns
into zero instead of failing, and unknown flags are skipped. Both cases print
a warning but never change the outcome.
"""

import math
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from .exceptions import MissingArgumentError, UsageError
from .options import DEFAULT_OPTIONS, DEFAULT_OUTPUT_PATH, Options

_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_INT_PREFIX = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class ParsedArguments:
    """Result of a successful parse"""
    options: Options
    image_path: str
    output_path: str


class _Flag(NamedTuple):
    field: str
    convert: Callable[[str], object]


def _warn_if_partial(text: str, match: Optional["re.Match"]) -> None:
    consumed = match.end() if match else 0
    if text[consumed:].strip() or consumed == 0:
        print(f"Warning: '{text}' is not a valid number, using {text[:consumed].strip() or '0'}")


def atof(text: str) -> float:
    """
    Locale-independent equivalent of C ``atof``

    The longest numeric prefix of ``text`` is converted; text without any
    numeric prefix yields 0.0.
    """
    match = _FLOAT_PREFIX.match(text)
    _warn_if_partial(text, match)
    if match is None:
        return 0.0
    return float(match.group(0))


def atoi(text: str) -> int:
    """Locale-independent equivalent of C ``atoi``"""
    match = _INT_PREFIX.match(text)
    _warn_if_partial(text, match)
    if match is None:
        return 0
    return int(match.group(0))


def _atof_truncated(text: str) -> int:
    # --omax is read as a float and truncated
    value = atof(text)
    if not math.isfinite(value):
        return 0
    return int(value)


def _flag_bool(text: str) -> bool:
    return bool(atoi(text))


def _clamp_descriptor(text: str) -> int:
    value = atoi(text)
    if value < 0 or value > 2:
        value = 2
    return value


def _clamp_channels(text: str) -> int:
    value = atoi(text)
    if value <= 0 or value > 3:
        value = 3
    return value


def _clamp_size(text: str) -> int:
    return max(atoi(text), 0)


VALUE_FLAGS: Dict[str, _Flag] = {
    "--soffset": _Flag("soffset", atof),
    "--omax": _Flag("omax", _atof_truncated),
    "--dthreshold": _Flag("dthreshold", atof),
    "--sderivatives": _Flag("sderivatives", atof),
    "--nsublevels": _Flag("nsublevels", atoi),
    "--diffusivity": _Flag("diffusivity", atoi),
    "--descriptor": _Flag("descriptor", _clamp_descriptor),
    "--descriptor_channels": _Flag("descriptor_channels", _clamp_channels),
    "--descriptor_size": _Flag("descriptor_size", _clamp_size),
    "--save_scale_space": _Flag("save_scale_space", _flag_bool),
    "--upright": _Flag("upright", _flag_bool),
    "--output": _Flag("output", str),
}


def usage_text(program: str = "akaze-features") -> str:
    d = DEFAULT_OPTIONS
    return "\n".join([
        f"Usage: {program} <image> [options]",
        "",
        "Options:",
        f"  --soffset <float>            Base scale offset (default {d.soffset})",
        f"  --omax <int>                 Maximum octave evolution (default {d.omax})",
        f"  --nsublevels <int>           Sublevels per octave (default {d.nsublevels})",
        f"  --dthreshold <float>         Detector response threshold (default {d.dthreshold})",
        f"  --sderivatives <float>       Smoothing sigma for derivatives (default {d.sderivatives})",
        f"  --diffusivity <int>          0 PM-G1, 1 PM-G2, 2 Weickert, 3 Charbonnier (default {d.diffusivity})",
        f"  --descriptor <int>           0 upright real, 1 real, 2 binary (default {d.descriptor})",
        f"  --descriptor_channels <int>  Binary descriptor channels, 1-3 (default {d.descriptor_channels})",
        f"  --descriptor_size <int>      Binary descriptor bits, 0 for full length (default {d.descriptor_size})",
        f"  --upright <0|1>              Skip orientation estimation (default {int(d.upright)})",
        f"  --save_scale_space <0|1>     Export the nonlinear scale space (default {int(d.save_scale_space)})",
        "  --output <path>              Save keypoints and descriptors to <path>",
        "  --verbose                    Print options and progress",
        "  --help                       Show this message",
    ])


def show_input_options_help() -> None:
    print(usage_text())


def parse_input_options(argv: Sequence[str]) -> ParsedArguments:
    """
    Turn a raw argument list into options and paths

    Args:
        argv: Arguments without the program name

    Returns:
        ParsedArguments holding frozen options, the image path and the
        keypoint output path

    Raises:
        UsageError: No image path was given or ``--help`` was requested
        MissingArgumentError: A value-taking flag has no following token
    """
    args: List[str] = list(argv)
    if not args:
        show_input_options_help()
        raise UsageError("an image path is required")
    if "--help" in args:
        show_input_options_help()
        raise UsageError("help requested")

    values: Dict[str, object] = {}
    output_path = DEFAULT_OUTPUT_PATH
    image_path = args[0]

    i = 1
    while i < len(args):
        token = args[i]
        if token == "--verbose":
            values["verbosity"] = True
        elif token in VALUE_FLAGS:
            flag = VALUE_FLAGS[token]
            if token == "--output":
                values["save_keypoints"] = True
            i += 1
            if i >= len(args):
                print("Error introducing input options!!")
                raise MissingArgumentError(token)
            value = flag.convert(args[i])
            if flag.field == "output":
                output_path = value
            else:
                values[flag.field] = value
        else:
            print(f"Warning: ignoring unrecognized option '{token}'")
        i += 1

    return ParsedArguments(
        options=replace(DEFAULT_OPTIONS, **values),
        image_path=image_path,
        output_path=output_path,
    )
