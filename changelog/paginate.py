'''
append-only caches for paginated github-api listings

GitHub lists tags, releases, commits and pull-requests in pages of (at most) 100 elements. Callers
typically only need the first few pages, so pages are fetched lazily, one at a time, and kept for
the rest of the run. The page-cursor only ever moves forward; no page is requested twice.
'''
import collections.abc
import typing

import changelog.model as cm
import changelog.observe as co


T = typing.TypeVar('T')

FetchPage = collections.abc.Callable[
    [int, int], # page (1-based), per_page
    collections.abc.Awaitable[collections.abc.Sequence[dict]],
]
Parse = collections.abc.Callable[[dict], T | None]


class PaginatedCache(typing.Generic[T]):
    def __init__(
        self,
        kind: str,
        fetch_page: FetchPage,
        parse: Parse,
        key: collections.abc.Callable[[T], str]=None,
        page_size: int=cm.DEFAULT_PAGE_SIZE,
        max_pages: int=cm.DEFAULT_MAX_PAGES,
        observer: co.Observer=None,
    ):
        '''
        @param kind: human-readable name of listed elements (used for reporting)
        @param fetch_page: coroutine-function retrieving raw elements of given page
        @param parse: converts raw elements; elements for which `None` is returned are dropped
            (end-of-listing is still determined from the amount of raw elements)
        @param key: optional key-function; required for `lookup` and `ensure_contains`
        '''
        self.kind = kind
        self._fetch_page = fetch_page
        self._parse = parse
        self._key = key
        self.page_size = page_size
        self.max_pages = max_pages
        self.observer = observer or co.LoggingObserver()

        self.items: list[T] = []
        self.page = 0 # amount of fetched pages
        self.exhausted = False # end of listing was reached
        self.truncated = False # max_pages was reached
        self._page_ends: list[int] = []
        self._positions: dict[str, int] = {}

    @property
    def done(self) -> bool:
        return self.exhausted or self.truncated

    async def fetch_more(self) -> tuple[T, ...]:
        '''
        fetches exactly one additional page, and returns the elements it added. Returns an empty
        tuple if there are no more pages to fetch (which is also the case if the last page
        contained no element passing `parse`).
        '''
        if self.exhausted:
            return ()
        if self.page >= self.max_pages:
            if not self.truncated:
                self.truncated = True
                self.observer.pagination_truncated(kind=self.kind, pages=self.page)
            return ()

        self.page += 1
        raw_elements = await self._fetch_page(self.page, self.page_size)
        self.observer.page_fetched(
            kind=self.kind,
            page=self.page,
            count=len(raw_elements),
        )

        # github returns partial (or empty) pages only at the end of the listing
        if len(raw_elements) < self.page_size:
            self.exhausted = True

        added = []
        for raw in raw_elements:
            if (element := self._parse(raw)) is None:
                continue
            if self._key:
                self._positions.setdefault(self._key(element), len(self.items))
            self.items.append(element)
            added.append(element)

        self._page_ends.append(len(self.items))

        return tuple(added)

    def lookup(self, key: str) -> int | None:
        '''
        returns the index of the (first) cached element with given key, or None. Never fetches.
        '''
        return self._positions.get(key)

    async def ensure_contains(self, key: str) -> int:
        '''
        returns the index of the element with given key, fetching more pages as needed.

        raises ExhaustedPagination if the end of the listing (or max_pages) is reached before
        finding the element.
        '''
        if not self._key:
            raise ValueError(f'{self.kind}: a key-function is required for lookups')

        while (idx := self.lookup(key)) is None:
            if self.done:
                raise cm.ExhaustedPagination(kind=self.kind, pages=self.page)
            await self.fetch_more()

        return idx

    async def iter_pages(self) -> collections.abc.AsyncIterator[tuple[T, ...]]:
        '''
        yields the elements of each page (already cached pages first), fetching further pages
        lazily as the caller consumes them
        '''
        start = 0
        page_idx = 0
        while True:
            while page_idx < len(self._page_ends):
                end = self._page_ends[page_idx]
                yield tuple(self.items[start:end])
                start = end
                page_idx += 1

            if self.done:
                return
            await self.fetch_more()

    async def __aiter__(self) -> collections.abc.AsyncIterator[T]:
        async for page in self.iter_pages():
            for element in page:
                yield element
