"""
Supabase REST API client.
Uses httpx for async HTTP requests to the PostgREST, RPC and auth endpoints.
"""
import logging
from typing import Optional, List, Dict, Any, Tuple
import httpx
from evano.core.config import settings

logger = logging.getLogger(__name__)


class SupabaseError(RuntimeError):
    """A write or RPC against the Supabase project failed."""


def in_filter(values) -> str:
    """Build a PostgREST ``in.(...)`` filter, quoting string values."""
    parts = []
    for value in values:
        if isinstance(value, str):
            parts.append(f'"{value}"')
        else:
            parts.append(str(value))
    return f"in.({','.join(parts)})"


class SupabaseRestClient:
    """
    Async Supabase REST API client.

    Reads fail open: errors are logged and an empty result is returned.
    Writes return None (or False) on error and leave raising to the caller.
    """

    def __init__(self, url: str = None, key: str = None, service_key: str = None,
                 transport: httpx.AsyncBaseTransport = None):
        self.url = (url or settings.supabase_url).rstrip('/')
        self.key = key or settings.supabase_anon_key
        self.service_key = service_key or settings.supabase_service_key

        if not self.url or not self.key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")

        self.base_url = f"{self.url}/rest/v1"
        self.auth_url = f"{self.url}/auth/v1"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self, use_admin: bool = False, token: str = None) -> Dict[str, str]:
        """Request headers. A user token makes row level security apply to that user."""
        key = (self.service_key or self.key) if use_admin else self.key
        return {
            'apikey': key,
            'Authorization': f'Bearer {token or key}',
            'Content-Type': 'application/json',
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=settings.http_timeout, transport=self._transport)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def get(
        self,
        table: str,
        select: str = "*",
        filters: Dict[str, str] = None,
        single: bool = False,
        order: str = None,
        limit: int = None,
        offset: int = None,
        use_admin: bool = False,
        token: str = None
    ) -> Optional[Any]:
        """
        GET request to Supabase REST API.

        Args:
            table: Table name
            select: Columns to select, embedded resources included (e.g. "video_id,videos(*)")
            filters: Dict of filters (column: "eq.value", "in.(1,2)", "ilike.*value*")
            single: If True, return single object instead of list
            order: Order by clause (e.g., "created_at.desc")
            limit: Maximum rows to return (None fetches every page)
            offset: Number of rows to skip
            use_admin: If True, use service role key to bypass RLS
            token: Caller's access token

        Returns:
            Rows, a single row, or None/[] on error
        """
        try:
            if limit is None and not single:
                return await self._get_all_paginated(table, select, filters, order,
                                                     use_admin=use_admin, token=token)

            client = await self._get_client()

            params = {'select': select}
            if filters:
                params.update(filters)
            if order:
                params['order'] = order
            if limit is not None:
                params['limit'] = limit
            if offset is not None:
                params['offset'] = offset

            headers = self._headers(use_admin, token)
            if single:
                headers['Accept'] = 'application/vnd.pgrst.object+json'

            response = await client.get(
                f"{self.base_url}/{table}",
                headers=headers,
                params=params
            )

            if response.status_code in (200, 206):
                return response.json()
            elif response.status_code == 406 and single:
                # No rows found for single request
                return None
            else:
                logger.error("GET %s error: %s - %s", table, response.status_code, response.text[:200])
                return None if single else []

        except (httpx.HTTPError, ValueError) as e:
            logger.error("GET %s error: %s", table, e)
            return None if single else []

    async def _get_all_paginated(
        self,
        table: str,
        select: str = "*",
        filters: Dict[str, str] = None,
        order: str = None,
        page_size: int = 1000,
        use_admin: bool = False,
        token: str = None
    ) -> List[Dict]:
        """Fetch all rows from a table page by page (Supabase caps a response at 1000 rows)."""
        all_data = []
        offset = 0
        client = await self._get_client()
        headers = self._headers(use_admin, token)

        while True:
            params = {'select': select, 'limit': page_size, 'offset': offset}
            if filters:
                params.update(filters)
            if order:
                params['order'] = order

            response = await client.get(
                f"{self.base_url}/{table}",
                headers=headers,
                params=params
            )

            if response.status_code not in (200, 206):
                # Never hand back a partial table
                logger.error("Pagination error for %s at offset %s: %s", table, offset, response.status_code)
                return []

            data = response.json()
            if not data:
                break
            all_data.extend(data)

            if len(data) < page_size:
                break

            offset += page_size

        return all_data

    async def count(self, table: str, filters: Dict[str, str] = None, token: str = None) -> int:
        """Get count of rows matching filters."""
        try:
            client = await self._get_client()

            params = {'select': 'count', 'limit': 0}
            if filters:
                params.update(filters)

            headers = {**self._headers(token=token), 'Prefer': 'count=exact'}

            response = await client.get(
                f"{self.base_url}/{table}",
                headers=headers,
                params=params
            )

            if response.status_code in (200, 206):
                content_range = response.headers.get('Content-Range', '0-0/0')
                if '/' in content_range:
                    count_str = content_range.split('/')[-1]
                    if count_str != '*':
                        return int(count_str)
            return 0
        except (httpx.HTTPError, ValueError) as e:
            logger.error("COUNT %s error: %s", table, e)
            return 0

    async def insert(
        self,
        table: str,
        data: Dict[str, Any],
        upsert: bool = False,
        on_conflict: str = None,
        use_admin: bool = False,
        token: str = None
    ) -> Optional[Dict]:
        """
        INSERT into Supabase table.

        Args:
            table: Table name
            data: Row to insert
            upsert: If True, merge on conflict
            on_conflict: Comma-separated unique columns used for the upsert
            use_admin: If True, use service role key
            token: Caller's access token

        Returns:
            Inserted row or None on error
        """
        try:
            client = await self._get_client()

            headers = self._headers(use_admin, token)
            headers['Prefer'] = 'return=representation'
            if upsert:
                headers['Prefer'] = 'resolution=merge-duplicates,return=representation'

            params = {'on_conflict': on_conflict} if on_conflict else None

            response = await client.post(
                f"{self.base_url}/{table}",
                headers=headers,
                params=params,
                json=data
            )

            if response.status_code in (200, 201, 206):
                result = response.json()
                return result[0] if isinstance(result, list) and result else result
            else:
                logger.error("INSERT %s error: %s - %s", table, response.status_code, response.text[:200])
                return None

        except (httpx.HTTPError, ValueError) as e:
            logger.error("INSERT %s error: %s", table, e)
            return None

    async def update(
        self,
        table: str,
        data: Dict[str, Any],
        filters: Dict[str, str],
        use_admin: bool = False,
        token: str = None
    ) -> Optional[List[Dict]]:
        """
        UPDATE Supabase table.

        Returns:
            Updated rows (possibly empty) or None on error
        """
        try:
            client = await self._get_client()

            headers = self._headers(use_admin, token)
            headers['Prefer'] = 'return=representation'

            response = await client.patch(
                f"{self.base_url}/{table}",
                headers=headers,
                params=filters,
                json=data
            )

            if response.status_code in (200, 204, 206):
                if response.status_code == 204:
                    return []
                return response.json()
            else:
                logger.error("UPDATE %s error: %s - %s", table, response.status_code, response.text[:200])
                return None

        except (httpx.HTTPError, ValueError) as e:
            logger.error("UPDATE %s error: %s", table, e)
            return None

    async def delete(
        self,
        table: str,
        filters: Dict[str, str],
        use_admin: bool = False,
        token: str = None
    ) -> bool:
        """DELETE from Supabase table. True on success."""
        try:
            client = await self._get_client()

            headers = self._headers(use_admin, token)
            headers['Prefer'] = 'return=minimal'

            response = await client.delete(
                f"{self.base_url}/{table}",
                headers=headers,
                params=filters
            )

            if response.status_code not in (200, 204):
                logger.error("DELETE %s error: %s", table, response.status_code)
                return False
            return True

        except (httpx.HTTPError, ValueError) as e:
            logger.error("DELETE %s error: %s", table, e)
            return False

    async def rpc(
        self,
        function_name: str,
        params: Dict[str, Any] = None,
        use_admin: bool = False,
        token: str = None
    ) -> Tuple[bool, Optional[Any]]:
        """
        Call a Supabase RPC function.

        Returns:
            (ok, result). Void functions answer 204 and give (True, None).
        """
        try:
            client = await self._get_client()

            response = await client.post(
                f"{self.base_url}/rpc/{function_name}",
                headers=self._headers(use_admin, token),
                json=params or {}
            )

            if response.status_code == 204:
                return True, None
            if response.status_code in (200, 201):
                return True, response.json()

            logger.error("RPC %s error: %s - %s", function_name, response.status_code, response.text[:200])
            return False, None

        except (httpx.HTTPError, ValueError) as e:
            logger.error("RPC %s error: %s", function_name, e)
            return False, None

    async def sign_out(self, token: str) -> bool:
        """Revoke the session behind an access token."""
        client = await self._get_client()
        response = await client.post(
            f"{self.auth_url}/logout",
            headers=self._headers(token=token),
        )
        return response.status_code in (200, 204)


# Global client instance
_client: Optional[SupabaseRestClient] = None


def get_supabase_rest() -> SupabaseRestClient:
    """Get global Supabase REST client instance."""
    global _client
    if _client is None:
        _client = SupabaseRestClient()
    return _client


async def close_supabase_rest():
    """Close global Supabase REST client."""
    global _client
    if _client:
        await _client.close()
        _client = None
