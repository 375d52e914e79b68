#!/usr/bin/env python
"""
Scheduled edge weight decay.

Run once a day (cron, systemd timer, k8s CronJob). Multiplies every edge
weight above the floor by the decay factor so weights reflect recent
interaction. Safe to re-run and safe to run alongside live traffic.

Usage:
    python scripts/apply_weight_decay.py
    python scripts/apply_weight_decay.py --factor 0.95 --floor 0.05 --batch-size 1000
"""

import sys
import time
import argparse
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from socialgraph.api.config import get_decay_factor, get_decay_floor
from socialgraph.core.exceptions import GraphError
from socialgraph.services import build_services
from socialgraph.utils.logging_config import configure_maintenance_logging

logger = logging.getLogger("apply_weight_decay")


def main():
    parser = argparse.ArgumentParser(description="Apply time decay to follow edge weights")
    parser.add_argument('--db-path', default=None, help='Database file path or URL')
    parser.add_argument('--factor', type=float, default=None, help='Decay multiplier (default: DECAY_FACTOR or 0.99)')
    parser.add_argument('--floor', type=float, default=None, help='Weight floor (default: DECAY_FLOOR or 0.05)')
    parser.add_argument('--batch-size', type=int, default=500, help='Edges per UPDATE batch')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    configure_maintenance_logging(debug=args.debug)

    factor = args.factor if args.factor is not None else get_decay_factor()
    floor = args.floor if args.floor is not None else get_decay_floor()

    services = build_services(db_path=args.db_path, cache_enabled=False, create_tables=False)
    start = time.time()
    try:
        affected = services.graph.apply_weight_decay(factor, floor, batch_size=args.batch_size)
    except GraphError as e:
        logger.error(f"Weight decay failed: {e}")
        return 1
    finally:
        services.close()

    logger.info(f"Decayed {affected} edges in {time.time() - start:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
