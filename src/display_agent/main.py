from __future__ import annotations

import argparse
import asyncio
import logging

from .config import AgentSettings
from .logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Display agent (face edge reporter)")
    parser.add_argument("--print-config", action="store_true", help="Print resolved configuration and exit.")
    parser.add_argument("--list-cameras", action="store_true", help="List camera indices OpenCV can open and exit.")
    parser.add_argument("--run", action="store_true", help="Connect to the coordination service and start detecting.")
    return parser


async def run_agent(cfg: AgentSettings) -> int:
    """
    Connect, register, and run the detection session until the channel closes.
    """
    from .camera import OpenCVCamera, probe_camera_devices
    from .client import CoordinatorClient
    from .detector import YuNetFaceDetector
    from .session import DisplaySession, SessionState

    client = CoordinatorClient(cfg.server_url)
    await client.connect()
    await client.register(cfg.display_id)

    session = DisplaySession(
        cfg,
        detector=YuNetFaceDetector(cfg.weights_path, cfg.input_size, cfg.score_threshold),
        camera_factory=OpenCVCamera,
        report_edge=client.report_edge,
        device_probe=probe_camera_devices,
    )

    try:
        if not await session.start():
            return 1
        await client.listen(
            on_face_approaching=session.on_face_approaching,
            on_arrangement_changed=session.on_arrangement_changed,
        )
        return 0
    finally:
        await session.stop()
        await client.close()
        logger.info("Display agent stopped (state=%s)", session.state.value)
        if session.state == SessionState.FAILED:
            logger.error("Session failed: %s", session.status_text)


def run(argv: list[str] | None = None, cfg: AgentSettings | None = None) -> int:
    """
    Display agent entrypoint.
    """
    cfg = cfg or AgentSettings()
    try:
        args = build_parser().parse_args(argv)

        configure_logging(cfg.log_level)

        logger.info("Display agent starting")
        logger.info(
            "Resolved config: display_id=%s server=%s camera=%s threshold=%s",
            cfg.display_id, cfg.server_url, cfg.camera_index, cfg.edge_threshold
        )

        if args.print_config:
            print(cfg.model_dump())
            return 0

        if args.list_cameras:
            from .camera import probe_camera_devices

            print(probe_camera_devices())
            return 0

        if args.run:
            return asyncio.run(run_agent(cfg))

        logger.info("Nothing to do. Use --print-config, --list-cameras or --run.")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0
    except Exception:
        # Log unexpected exceptions so the agent is diagnosable.
        logger.exception("Display agent crashed due to an unexpected error")
        if cfg.debug or cfg.log_level.upper() == "DEBUG":
            raise
        return 1


if __name__ == "__main__":
    raise SystemExit(run())
