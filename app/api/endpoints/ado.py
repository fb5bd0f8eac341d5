"""
Azure DevOps 작업 항목 가져오기 API입니다.
응답 키는 camelCase입니다 (workItems 등).
"""

from fastapi import APIRouter, Depends

from app.ingestion import format_work_items
from app.models import WorkItemSearch, WorkItemImportRequest
from app.services.ado_client import AzureDevOpsClient, get_ado_client

router = APIRouter()


@router.get("/projects")
async def list_projects(client: AzureDevOpsClient = Depends(get_ado_client)) -> dict:
    projects = await client.list_projects()
    return {
        "success": True,
        "projects": [project.model_dump() for project in projects],
        "count": len(projects),
    }


@router.post("/search")
async def search_work_items(
    search: WorkItemSearch,
    client: AzureDevOpsClient = Depends(get_ado_client),
) -> dict:
    """
    작업 항목 검색.
    필터가 하나도 없으면 최근 변경된 항목(기본 12개월)으로 제한됩니다.
    """
    work_items = await client.search_work_items(search)
    return {
        "success": True,
        "workItems": [item.model_dump() for item in work_items],
        "count": len(work_items),
    }


@router.post("/import")
async def import_work_items(
    request: WorkItemImportRequest,
    client: AzureDevOpsClient = Depends(get_ado_client),
) -> dict:
    """선택한 작업 항목을 원본 텍스트로 변환합니다. 결과 text를 실행 시작 시 text로 넘기면 됩니다."""
    work_items = await client.get_work_items(request.ids)
    return {
        "success": True,
        "text": format_work_items(work_items),
        "count": len(work_items),
    }
