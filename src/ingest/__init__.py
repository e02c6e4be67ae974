"""Checkpointed JSONL ingestion.

This module reads line-delimited JSON sources and stages decoded records.
It commits delivery offsets so consumers resume after restarts.
"""
