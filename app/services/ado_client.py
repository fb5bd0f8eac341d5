"""
Azure DevOps REST 클라이언트.

프로젝트 목록 조회, WIQL 기반 작업 항목 검색, ID로 작업 항목 조회를 제공합니다.
자격 증명(조직, PAT)은 서버 설정에서만 읽습니다.
"""

import calendar
import logging
from datetime import date
from typing import Any, Iterable, Optional
from urllib.parse import quote

import httpx

from app.config import get_settings
from app.exceptions import ConfigurationError, IssueTrackerError
from app.models import AdoProject, WorkItem, WorkItemSearch

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://dev.azure.com"
PROJECT_PAGE_SIZE = 100
WORK_ITEM_BATCH_SIZE = 200  # workitems API 한 번에 조회 가능한 최대 ID 수

WORK_ITEM_FIELDS = [
    "System.Id",
    "System.Title",
    "System.Description",
    "System.State",
    "System.WorkItemType",
    "System.TeamProject",
    "System.CreatedDate",
    "System.ChangedDate",
    "System.Tags",
    "System.AreaPath",
    "System.IterationPath",
]


def subtract_months(value: date, months: int) -> date:
    """months개월 전 날짜. 해당 월에 같은 날이 없으면 말일로 맞춥니다."""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _in_list(field: str, values: Iterable[str]) -> str:
    return f"[{field}] IN ({', '.join(_quote_literal(v) for v in values)})"


def build_wiql(
    search: WorkItemSearch,
    today: Optional[date] = None,
    lookback_months: Optional[int] = None,
) -> str:
    """
    검색 조건으로 WIQL 쿼리를 만듭니다.
    조건이 하나도 없으면 최근 lookback_months개월 안에 변경된 항목으로 제한합니다.
    """
    conditions: list[str] = []

    if search.work_item_types:
        conditions.append(_in_list("System.WorkItemType", search.work_item_types))
    if search.states:
        conditions.append(_in_list("System.State", search.states))
    if search.projects:
        conditions.append(_in_list("System.TeamProject", search.projects))

    if search.search_text and search.search_text.strip():
        conditions.append(f"[System.Title] CONTAINS {_quote_literal(search.search_text.strip())}")
    if search.iteration_path:
        conditions.append(f"[System.IterationPath] CONTAINS {_quote_literal(search.iteration_path)}")
    if search.assigned_to:
        conditions.append(f"[System.AssignedTo] CONTAINS {_quote_literal(search.assigned_to)}")
    if search.created_by:
        conditions.append(f"[System.CreatedBy] CONTAINS {_quote_literal(search.created_by)}")

    date_bounds = [
        ("System.CreatedDate", ">=", search.created_date_from),
        ("System.CreatedDate", "<=", search.created_date_to),
        ("System.ChangedDate", ">=", search.changed_date_from),
        ("System.ChangedDate", "<=", search.changed_date_to),
    ]
    for field, op, value in date_bounds:
        if value is not None:
            conditions.append(f"[{field}] {op} '{value.isoformat()}'")

    if not conditions:
        if lookback_months is None:
            lookback_months = get_settings().ado_default_lookback_months
        since = subtract_months(today or date.today(), lookback_months)
        conditions.append(f"[System.ChangedDate] >= '{since.isoformat()}'")

    return (
        "SELECT [System.Id] FROM WorkItems "
        f"WHERE {' AND '.join(conditions)} "
        "ORDER BY [System.ChangedDate] DESC"
    )


def strip_system_prefix(fields: dict[str, Any]) -> dict[str, Any]:
    """"System.Title" → "Title". 다른 접두어(Microsoft.VSTS. 등)는 그대로 둡니다."""
    return {
        (key[len("System."):] if key.startswith("System.") else key): value
        for key, value in fields.items()
    }


class AzureDevOpsClient:
    """Azure DevOps REST API 비동기 클라이언트."""

    def __init__(
        self,
        organization: Optional[str] = None,
        pat: Optional[str] = None,
        api_version: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        settings = get_settings()
        self.organization = organization if organization is not None else settings.ado_organization
        self.pat = pat if pat is not None else settings.ado_pat
        self.api_version = api_version or settings.ado_api_version
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.organization and self.pat)

    def check_configuration(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(
                "ADO configuration missing. Please configure ADO_ORGANIZATION and ADO_PAT environment variables."
            )

    def _client(self) -> httpx.AsyncClient:
        self.check_configuration()
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/{quote(self.organization)}",
            auth=httpx.BasicAuth("", self.pat),
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        params = {"api-version": self.api_version, **kwargs.pop("params", {})}
        async with self._client() as client:
            try:
                response = await client.request(method, url, params=params, **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"[ADO] 요청 실패 {method} {url}: {type(e).__name__}: {e}")
                raise IssueTrackerError(f"Azure DevOps request failed: {e}") from e

        if response.status_code >= 400:
            body = self._error_body(response)
            message = body.get("message") if isinstance(body, dict) else None
            logger.error(f"[ADO] {method} {url} -> {response.status_code}: {message or body}")
            raise IssueTrackerError(
                message or f"Azure DevOps returned HTTP {response.status_code}",
                details=body,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise IssueTrackerError(
                "Azure DevOps returned a non-JSON response",
                details={"body": response.text[:500]},
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"body": response.text[:500]}

    async def list_projects(self) -> list[AdoProject]:
        """프로젝트 목록 (이름순, 대소문자 무시)."""
        data = await self._request("GET", "/_apis/projects", params={"$top": PROJECT_PAGE_SIZE})
        projects = [
            AdoProject(
                id=str(item.get("id", "")),
                name=item.get("name", ""),
                description=item.get("description") or "",
            )
            for item in data.get("value", [])
        ]
        projects.sort(key=lambda p: p.name.lower())
        logger.info(f"[ADO] 프로젝트 {len(projects)}개 조회")
        return projects

    async def search_work_items(
        self,
        search: WorkItemSearch,
        today: Optional[date] = None,
    ) -> list[WorkItem]:
        """WIQL로 작업 항목을 검색하고 상세 정보를 가져옵니다 (최근 변경순)."""
        settings = get_settings()
        wiql = build_wiql(search, today=today)
        max_results = search.max_results or settings.ado_default_max_results

        # 프로젝트가 하나면 프로젝트 범위 엔드포인트 사용
        if len(search.projects) == 1:
            url = f"/{quote(search.projects[0])}/_apis/wit/wiql"
        else:
            url = "/_apis/wit/wiql"

        logger.info(f"[ADO] WIQL 검색: {wiql}")
        data = await self._request("POST", url, json={"query": wiql})

        refs = data.get("workItems") or []
        ids = [ref["id"] for ref in refs if "id" in ref][:max_results]
        if not ids:
            return []

        return await self.get_work_items(ids)

    async def get_work_items(self, ids: list[int]) -> list[WorkItem]:
        """ID 목록으로 작업 항목을 조회합니다. 요청한 ID 순서를 유지합니다."""
        if not ids:
            return []

        fetched: dict[int, WorkItem] = {}
        for start in range(0, len(ids), WORK_ITEM_BATCH_SIZE):
            batch = ids[start:start + WORK_ITEM_BATCH_SIZE]
            data = await self._request(
                "GET",
                "/_apis/wit/workitems",
                params={
                    "ids": ",".join(str(i) for i in batch),
                    "fields": ",".join(WORK_ITEM_FIELDS),
                },
            )
            for item in data.get("value", []):
                work_item = WorkItem(
                    id=item["id"],
                    url=item.get("url", ""),
                    fields=strip_system_prefix(item.get("fields", {})),
                )
                fetched[work_item.id] = work_item

        logger.info(f"[ADO] 작업 항목 {len(fetched)}/{len(ids)}개 조회")
        return [fetched[i] for i in ids if i in fetched]


# 싱글톤 인스턴스
_ado_client: Optional[AzureDevOpsClient] = None


def get_ado_client() -> AzureDevOpsClient:
    global _ado_client
    if _ado_client is None:
        _ado_client = AzureDevOpsClient()
    return _ado_client
