"""
Services package for the schedule sync service

This package contains the feed adapter, the reconciliation core and the run pipeline.
"""
from schedule_sync.services.channel_resolver import build_channel_map, resolve_channels
from schedule_sync.services.reconciler import ReconcileStats, ScheduleReconciler
from schedule_sync.services.sync_service import reconcile_feed, run_sync
from schedule_sync.services.xmltv_parser_service import parse_xmltv_file

__all__ = [
    'build_channel_map',
    'resolve_channels',
    'ReconcileStats',
    'ScheduleReconciler',
    'reconcile_feed',
    'run_sync',
    'parse_xmltv_file',
]
