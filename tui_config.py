from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
import argparse
import configparser

from key_codes import Binding, Keymap
from request_dispatch import DEFAULT_TIMEOUT


CONFIG_FILE = "httptabs.ini"
LOG_FILE = "httptabs.log"


class ColorMode(Enum):
    """
    Indicates the structure of the escape equence
    """
    # ColorMode {{{
    Bit4 = "4bit"       # Color immediately after CSI
    Bit8 = "8bit"       # Sequence is as follows: 38;5;{color}
    Bit24 = "24bit"     # RGB color sequence
    # }}}


class BorderStyle(Enum):
    # BorderStyle {{{
    Single = "single"
    Double = "double"
    Rounded = "rounded"
    # }}}


@dataclass
class Theme:
    # Theme {{{
    text_color:     str
    title_color:    str
    border_color:   str
    active_color:   str
    selected_color: str
    ok_color:       str
    redirect_color: str
    error_color:    str
    # }}}


@dataclass
class Arguments:
    # Arguments {{{
    debug:        bool = False
    config_file:  Path = Path(CONFIG_FILE)
    log_file:     Path = Path(LOG_FILE)
    color_mode:   ColorMode = ColorMode.Bit24
    border_style: BorderStyle = BorderStyle.Rounded
    timeout:      float = DEFAULT_TIMEOUT
    url:          Optional[str] = None
    method:       Optional[str] = None
    # }}}


# Keys of each colour section, paired with the Theme field they fill
THEME_KEYS = {
    "text_color": "text_color",
    "title_color": "title_color",
    "border_color": "border_color",
    "active_section_color": "active_color",
    "active_request_color": "selected_color",
    "ok_color": "ok_color",
    "redirect_color": "redirect_color",
    "error_color": "error_color",
}

DEFAULT_COLORS = {
    ColorMode.Bit24.value: {
        "text_color": "220,220,220",
        "title_color": "81,159,80",
        "border_color": "83,83,83",
        "active_section_color": "81,159,80",
        "active_request_color": "90,100,126",
        "ok_color": "33,255,78",
        "redirect_color": "255,198,109",
        "error_color": "218,73,57",
    },
    ColorMode.Bit8.value: {
        "text_color": "252",
        "title_color": "71",
        "border_color": "240",
        "active_section_color": "71",
        "active_request_color": "60",
        "ok_color": "47",
        "redirect_color": "215",
        "error_color": "167",
    },
    ColorMode.Bit4.value: {
        "text_color": "37",
        "title_color": "32",
        "border_color": "90",
        "active_section_color": "32",
        "active_request_color": "34",
        "ok_color": "92",
        "redirect_color": "93",
        "error_color": "91",
    },
}


def parse_args(argv: Optional[list[str]] = None) -> Arguments:
    # parse_args {{{
    description = "Compose, send and inspect HTTP requests in the terminal"
    parser = argparse.ArgumentParser(description=description)

    parser.add_argument("-c", "--config",
                        help="Path to configuration file " +
                        f"(defaults to '{CONFIG_FILE}')")

    parser.add_argument("-m", "--mode",
                        help="Color style: '4bit', '8bit', or '24bit' " +
                        "(defaults to '24bit')")

    parser.add_argument("-b", "--border",
                        help="Border style: 'single', 'double' or " +
                        "'rounded' (defaults to 'rounded')")

    parser.add_argument("-u", "--url", help="Initial request URL")

    parser.add_argument("-X", "--method", help="Initial request method")

    parser.add_argument("-t", "--timeout", type=float,
                        help="Request timeout in seconds " +
                        f"(defaults to {DEFAULT_TIMEOUT})")

    parser.add_argument("--log-file",
                        help=f"Debug log location (defaults to '{LOG_FILE}')")

    parser.add_argument("-g", "--debug", action="store_true",
                        help=argparse.SUPPRESS)

    args = Arguments()
    parsed_args = parser.parse_args(argv)

    if parsed_args.config is not None:
        args.config_file = Path(parsed_args.config)
    else:
        # Ensure we can run this script from anywhere
        scriptdir = Path(__file__).parent
        args.config_file = Path(scriptdir, CONFIG_FILE)

    if parsed_args.mode is not None:
        args.color_mode = (ColorMode)(parsed_args.mode.lower())

    if parsed_args.border is not None:
        args.border_style = (BorderStyle)(parsed_args.border.lower())

    if parsed_args.timeout is not None:
        if parsed_args.timeout <= 0:
            parser.error("timeout must be positive")
        args.timeout = parsed_args.timeout

    if parsed_args.log_file is not None:
        args.log_file = Path(parsed_args.log_file)

    args.url = parsed_args.url
    args.method = parsed_args.method
    args.debug = parsed_args.debug

    return args
    # }}}


def read_config(args: Arguments) -> configparser.ConfigParser:
    """
    Built in defaults first, then whatever the
    configuration file overrides, if it exists
    """
    # read_config {{{
    cp = configparser.ConfigParser()
    cp.read_dict(DEFAULT_COLORS)
    cp.read_dict({"keys": {}})
    cp.read(args.config_file)
    return cp
    # }}}


def parse_colors(args: Arguments,
                 cp: Optional[configparser.ConfigParser] = None) -> Theme:
    # parse_colors {{{
    cp = cp if cp is not None else read_config(args)
    mode = args.color_mode.value

    colors = {}
    for key, attribute in THEME_KEYS.items():
        colors[attribute] = validate_colors(key, cp[mode][key],
                                            args.color_mode)

    return Theme(**colors)
    # }}}


def parse_keymap(args: Arguments,
                 cp: Optional[configparser.ConfigParser] = None) -> Keymap:
    # parse_keymap {{{
    cp = cp if cp is not None else read_config(args)

    keys = {}
    for binding in Binding:
        if cp.has_option("keys", binding.value):
            keys[binding] = cp.get("keys", binding.value)

    return Keymap(keys)
    # }}}


def validate_colors(key: str, color: str, mode: ColorMode) -> str:
    """
    We may be expecting an integer value or an array depending
    on the color mode. This validates the expected format.
    """
    # validate_colors {{{
    if mode == ColorMode.Bit24:
        split = color.split(",")
        if len(split) != 3 or not all(part.strip().isdigit()
                                      for part in split):
            raise ValueError(f"Invalid RGB color format for {key}={color}")
        return ",".join(part.strip() for part in split)

    try:
        int(color)
    except ValueError as exception:
        raise ValueError(f"Color must be an integer for {key}={color}") \
            from exception
    return color.strip()
    # }}}
