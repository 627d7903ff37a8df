#!/usr/bin/env python3
"""
Senate Agreement Dashboard - Main Script

Loads the Senate member metadata and voting records, computes how often
senators vote alike, and renders the agreement views. Selecting members
publishes a selection change, which re-renders every view.

Usage:
    python -m senate_agreement.main                         # Render with default data
    python -m senate_agreement.main --select S001 S002      # Focus views on members
    python -m senate_agreement.main --data-dir /path/to/project
    python -m senate_agreement.main --metadata https://example.org/meta.json
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Hashable, List, Optional

from .analysis import AgreementAnalyzer
from .data_acquisition import DataLoader, LoadError
from .events import EventDispatcher
from .state import Congress
from .visualization import AgreementVisualizer

logger = logging.getLogger(__name__)


class SelectionError(KeyError):
    """Requested member ids are not in the loaded metadata."""


def resolve_member_ids(congress: Congress, raw_ids: List[str]) -> List[Hashable]:
    """
    Match command-line ids to member ids.

    Command-line values are strings, while ids in the metadata may be
    numbers; each value is matched against the string form of the known ids.
    """
    lookup = {str(member_id): member_id for member_id in congress.members.index}
    missing = [raw for raw in raw_ids if raw not in lookup]
    if missing:
        raise SelectionError(f"Unknown member ids: {missing}")
    return [lookup[raw] for raw in raw_ids]


def change_selection(
    congress: Congress,
    dispatcher: EventDispatcher,
    member_ids: List[Hashable]
) -> int:
    """
    Select members and notify the views.

    Returns:
        Number of views notified.

    Raises:
        SelectionError: If any id is not a known member.
    """
    try:
        congress.select_members(member_ids)
    except KeyError as e:
        raise SelectionError(*e.args) from e
    return dispatcher.selection_changed()


def run(
    data_dir: str,
    output_dir: str,
    metadata_path: Optional[str] = None,
    records_path: Optional[str] = None,
    selection: Optional[List[str]] = None,
    threshold: float = 50.0,
    timeout: float = DataLoader.DEFAULT_TIMEOUT,
    show_progress: bool = False
) -> Congress:
    """
    Load the data, render the views and apply an optional selection.

    Returns:
        The populated ``Congress`` state.
    """
    congress = Congress()
    dispatcher = EventDispatcher()

    visualizer = AgreementVisualizer(congress, output_dir=f"{output_dir}/figures")
    visualizer.agreement_threshold = threshold
    visualizer.attach(dispatcher)

    loader = DataLoader(
        congress,
        data_dir=data_dir,
        metadata_path=metadata_path,
        records_path=records_path,
        timeout=timeout,
        show_progress=show_progress,
    )
    # Initial rendering once both datasets are in
    loader.add_ready_callback(lambda _: visualizer.refresh())

    asyncio.run(loader.load())

    if selection:
        change_selection(congress, dispatcher, resolve_member_ids(congress, selection))

    return congress


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Render Senate voting agreement views"
    )
    parser.add_argument(
        '--data-dir', type=str,
        default=os.environ.get('SENATE_AGREEMENT_DATA_DIR', '.'),
        help='Base directory for relative data paths (default: $SENATE_AGREEMENT_DATA_DIR or .)'
    )
    parser.add_argument(
        '--metadata', type=str, default=None,
        help=f"Metadata JSON path or URL (default: {DataLoader.DATASETS['metadata']})"
    )
    parser.add_argument(
        '--records', type=str, default=None,
        help=f"Voting records JSON path or URL (default: {DataLoader.DATASETS['records']})"
    )
    parser.add_argument(
        '--output', type=str,
        default=os.environ.get('SENATE_AGREEMENT_OUTPUT', 'output'),
        help='Output directory (default: $SENATE_AGREEMENT_OUTPUT or output)'
    )
    parser.add_argument(
        '--select', type=str, nargs='+', default=None, metavar='ID',
        help='Member ids to focus the views on'
    )
    parser.add_argument(
        '--threshold', type=float, default=50.0,
        help='Agreement percentage for network edges (default: 50)'
    )
    parser.add_argument(
        '--timeout', type=float, default=DataLoader.DEFAULT_TIMEOUT,
        help=f'HTTP timeout in seconds (default: {DataLoader.DEFAULT_TIMEOUT})'
    )
    parser.add_argument(
        '--progress', action='store_true',
        help='Show download progress for URL sources'
    )
    parser.add_argument(
        '--log-level', type=str, default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        congress = run(
            data_dir=args.data_dir,
            output_dir=args.output,
            metadata_path=args.metadata,
            records_path=args.records,
            selection=args.select,
            threshold=args.threshold,
            timeout=args.timeout,
            show_progress=args.progress,
        )
    except LoadError as e:
        logger.error(f"Could not load data: {e}")
        return 1
    except (ValueError, RuntimeError) as e:
        # Payloads parsed but could not be turned into agreement data
        logger.error(f"Could not process data: {e}")
        return 1
    except SelectionError as e:
        logger.error(f"Invalid selection: {e}")
        return 2

    print(AgreementAnalyzer(congress).generate_report())
    logger.info("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
