"""
Schema introspection repository.

The fact collections have no declared schema; these queries let operators
see which fields a load actually produced.
"""
from typing import Any, Dict, List, Optional

from core.database import serialize_document
from core.repositories.base import BaseRepository, RETAIL_EXECUTION_PRIORITY
from core.observability import get_logger

logger = get_logger(__name__)

# Substrings that mark a field as an on-shelf availability candidate
OSA_FIELD_MARKERS = ("instock", "osa", "stock", "pod")
OSA_PRIMARY_FIELD = "Daily Instock POD"
OSA_FALLBACK_FIELD = "Pace Pct"
OSA_SAMPLE_SIZE = 100


def find_osa_fields(field_names: List[str]) -> List[str]:
    """Fields whose lowercase name contains one of the OSA markers."""
    return [
        name for name in field_names
        if any(marker in name.lower() for marker in OSA_FIELD_MARKERS)
    ]


def recommend_primary_field(osa_fields: List[str]) -> Optional[str]:
    for name in osa_fields:
        if OSA_PRIMARY_FIELD in name:
            return name
    return osa_fields[0] if osa_fields else None


class SchemaRepository(BaseRepository):
    """Collection discovery and field investigation."""

    async def describe_collections(self) -> Dict[str, Dict[str, Any]]:
        """Fields, one sample document and a count for every non-empty collection."""
        schema = {}
        for name in await self.db.list_collection_names():
            collection = self.db[name]
            sample = await collection.find_one({})
            if not sample:
                continue
            schema[name] = {
                "fields": list(sample.keys()),
                "sample": serialize_document(sample),
                "count": await collection.count_documents({}),
            }
        return schema

    async def discover_osa_fields(self) -> Dict[str, Any]:
        """Locate the field that holds on-shelf availability."""
        collection = self.db[RETAIL_EXECUTION_PRIORITY]
        sample = await collection.find_one({}) or {}
        all_fields = list(sample.keys())
        osa_fields = find_osa_fields(all_fields)

        accumulators: Dict[str, Any] = {"_id": None, "count": {"$sum": 1}}
        for name in osa_fields:
            accumulators[f"avg_{name}"] = {"$avg": f"${name}"}
            accumulators[f"min_{name}"] = {"$min": f"${name}"}
            accumulators[f"max_{name}"] = {"$max": f"${name}"}

        rows = await self.aggregate(RETAIL_EXECUTION_PRIORITY, [
            {"$limit": OSA_SAMPLE_SIZE},
            {"$group": accumulators},
        ])
        logger.info(
            "OSA field discovery",
            extra={"fields": len(all_fields), "candidates": osa_fields},
        )

        return {
            "allFields": all_fields,
            "osaFields": osa_fields,
            "sampleValues": serialize_document({name: sample.get(name) for name in osa_fields}),
            "aggregationResults": serialize_document(rows[0]) if rows else None,
            "recommendations": {
                "primaryField": recommend_primary_field(osa_fields),
                "fallbackField": OSA_FALLBACK_FIELD,
                "note": f"If OSA values are 0, the API will use {OSA_FALLBACK_FIELD} * 1.1 as fallback",
            },
        }
