#!/usr/bin/env python3
"""
Maintenance Worker Runner

Starts a Celery worker for the maintenance queue with an embedded beat
scheduler, so the notification retention sweep runs on its interval.

Usage:
    python workers.py [--log-level INFO] [--no-beat]
"""

import argparse
import logging

from app.core.celery_app import get_celery_app

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Maintenance Worker Runner")
    parser.add_argument("--log-level",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                     default="INFO",
                     help="Set the logging level")
    parser.add_argument("--no-beat", action="store_true",
                     help="Run the worker without the embedded beat scheduler")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )

    logger = logging.getLogger("worker")
    logger.info("Starting maintenance worker process")

    argv = ["worker", f"--loglevel={args.log_level}", "-Q", "maintenance"]
    if not args.no_beat:
        argv.append("--beat")
    get_celery_app().worker_main(argv)
