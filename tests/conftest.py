"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from capgraph.config import Settings
from capgraph.graph.hierarchy import HierarchyResult, build_hierarchy
from capgraph.models import GraphSnapshot

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        neighborhood_max_hops=10,
        radial_tension=0.85,
        search_max_results=8,
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency tests."""
    return NOW


@pytest.fixture
def sample_payload() -> dict:
    """
    Small hypergraph:

        file_ops (contains) -> read_config
        file_ops: read_file, write_file
        read_config: read_file (shared), parse_json
        db_sync: query
        list_dir is an orphan, unused is discarded (usage_count 0)
    """
    return {
        "nodes": [
            {
                "id": "cap-file-ops",
                "type": "capability",
                "label": "File Operations",
                "usage_count": 12,
                "success_rate": 0.95,
                "pagerank": 0.2,
                "community_id": 0,
                "description": "Read and write files on disk",
                "fqdn": "local.default.fs.file_ops",
                "last_used": (NOW - timedelta(hours=2)).isoformat(),
            },
            {
                "id": "cap-read-config",
                "type": "capability",
                "label": "Read Config",
                "usage_count": 4,
                "success_rate": 0.8,
                "pagerank": 0.1,
                "community_id": 0,
                "intent": "Load configuration from a json file",
                "last_used": (NOW - timedelta(days=3)).isoformat(),
            },
            {
                "id": "cap-db-sync",
                "type": "capability",
                "label": "Database Sync",
                "usage_count": 2,
                "success_rate": 0.5,
                "community_id": 1,
                "last_used": (NOW - timedelta(days=45)).isoformat(),
            },
            {
                "id": "cap-unused",
                "type": "capability",
                "label": "Unused",
                "usage_count": 0,
            },
            {
                "id": "filesystem:read_file",
                "type": "tool",
                "label": "read_file",
                "server": "filesystem",
                "pagerank": 0.3,
                "parents": ["cap-file-ops", "cap-read-config"],
            },
            {
                "id": "filesystem:write_file",
                "type": "tool",
                "label": "write_file",
                "server": "filesystem",
                "pagerank": 0.1,
                "parents": ["cap-file-ops"],
            },
            {
                "id": "std:parse_json",
                "type": "tool",
                "label": "parse_json",
                "server": "std",
                "module": "json",
                "parents": ["cap-read-config"],
            },
            {
                "id": "postgres:query",
                "type": "tool",
                "label": "query",
                "server": "postgres",
                "parents": ["cap-db-sync"],
            },
            {
                "id": "filesystem:list_dir",
                "type": "tool",
                "label": "list_dir",
                "server": "filesystem",
            },
        ],
        "edges": [
            {"source": "cap-file-ops", "target": "cap-read-config", "edge_type": "contains"},
            {"source": "cap-read-config", "target": "cap-db-sync", "edge_type": "dependency",
             "observed_count": 3},
            {"source": "filesystem:read_file", "target": "std:parse_json", "edge_type": "provides",
             "weight": 0.8},
            {"source": "cap-file-ops", "target": "filesystem:read_file", "edge_type": "contains"},
            {"source": "cap-file-ops", "target": "filesystem:write_file", "edge_type": "contains"},
            {"source": "cap-read-config", "target": "std:parse_json", "edge_type": "contains"},
            {"source": "cap-db-sync", "target": "postgres:query", "edge_type": "contains"},
            {"source": "cap-db-sync", "target": "ghost-node", "edge_type": "dependency"},
        ],
    }


@pytest.fixture
def sample_snapshot(sample_payload: dict) -> GraphSnapshot:
    """Parsed sample payload."""
    return GraphSnapshot.from_dict(sample_payload)


@pytest.fixture
def sample_hierarchy(sample_snapshot: GraphSnapshot) -> HierarchyResult:
    """Hierarchy of the sample payload."""
    return build_hierarchy(sample_snapshot)
