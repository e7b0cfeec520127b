import argparse
import logging
import sys

from nebula.config import ConfigError, load_config
from nebula.core.core import AppCore


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Gesture-controlled 3D canvas")
    parser.add_argument("--config", help="path to a JSON config file")
    parser.add_argument("--camera", type=int, help="camera index")
    parser.add_argument("--no-mirror", action="store_true", help="do not mirror the webcam image")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    # Remaining arguments belong to Qt
    return parser.parse_known_args(argv)


def main(argv=None):
    argv = sys.argv if argv is None else argv
    args, qt_args = parse_args(argv[1:])

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logging.getLogger("nebula").error("%s", e)
        return 2

    if args.camera is not None:
        config.capture.camera_index = args.camera
    if args.no_mirror:
        config.capture.mirror = False

    core = AppCore([argv[0]] + qt_args, config)
    return core.run()


if __name__ == "__main__":
    sys.exit(main())
