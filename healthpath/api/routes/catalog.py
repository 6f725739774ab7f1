from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter

from healthpath.reference_data import categories, pathology_tests, radiology_tests, search_tests


router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/pathology")
def pathology(q: str = "", category: Optional[str] = None) -> Dict[str, Any]:
    tests = pathology_tests()
    found = search_tests(tests, query=q, category=category)
    return {
        "categories": categories(tests),
        "value": [t.model_dump() for t in found],
        "Count": len(found),
    }


@router.get("/radiology")
def radiology(q: str = "", category: Optional[str] = None) -> Dict[str, Any]:
    tests = radiology_tests()
    found = search_tests(tests, query=q, category=category)
    return {
        "categories": categories(tests),
        "value": [t.model_dump() for t in found],
        "Count": len(found),
    }
