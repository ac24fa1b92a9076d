"\"\"\"Reference data: positions and classification catalogs.\"\"\""

from __future__ import annotations

import structlog

from ..errors import DuplicateCodeError, ListItemNotFoundError, PositionNotFoundError
from ..schemas import CATALOGS, CatalogName, ListItem, Position


class ReferenceCatalog:
    """Code-unique catalogs with publish flags and non-cascading removal.

    ``unpublish`` hides an entry from new submissions but keeps its label;
    ``remove`` drops it, after which lookups fall back to the raw code.
    Applicants are never rewritten by catalog edits.
    """

    def __init__(self, store) -> None:
        self._store = store
        self._logger = structlog.get_logger(__name__)

    # positions

    def positions(self, *, published_only: bool = False) -> list[Position]:
        positions = self._store.all_positions()
        if published_only:
            return [p for p in positions if p.published]
        return positions

    def get_position(self, code: str) -> Position:
        position = self._store.get_position(code.strip())
        if position is None:
            raise PositionNotFoundError(code)
        return position

    def resolve_position(self, code: str, *, published_only: bool = True) -> Position | None:
        position = self._store.get_position(code.strip())
        if position is None or (published_only and not position.published):
            return None
        return position

    def position_title(self, code: str) -> str:
        position = self._store.get_position(code.strip())
        return position.title if position else code

    def add_position(self, position: Position) -> Position:
        with self._store.transaction():
            if self._store.get_position(position.code) is not None:
                raise DuplicateCodeError("position", position.code)
            self._store.upsert_position(position)
        self._logger.info("position.added", code=position.code, open_positions=position.open_positions)
        return position

    def update_position(self, code: str, position: Position) -> Position:
        """Replace position ``code``; a new code must not collide.

        ``published`` is kept from the stored entry unless ``position`` sets it.
        """
        with self._store.transaction():
            position = _keep_published(position, self.get_position(code))
            if position.code != code and self._store.get_position(position.code) is not None:
                raise DuplicateCodeError("position", position.code)
            if position.code != code:
                self._store.delete_position(code)
            self._store.upsert_position(position)
        self._logger.info("position.updated", code=code, new_code=position.code)
        return position

    def remove_position(self, code: str) -> None:
        with self._store.transaction():
            self.get_position(code)
            self._store.delete_position(code)
        self._logger.info("position.removed", code=code)

    def set_position_published(self, code: str, published: bool) -> Position:
        with self._store.transaction():
            position = self.get_position(code).model_copy(update={"published": published})
            self._store.upsert_position(position)
        self._logger.info("position.published" if published else "position.unpublished", code=code)
        return position

    # classification lists

    def items(self, catalog: CatalogName, *, published_only: bool = False) -> list[ListItem]:
        items = self._store.all_items(_checked(catalog))
        if published_only:
            return [item for item in items if item.published]
        return items

    def resolve_label(self, catalog: CatalogName, value: str) -> str:
        if not value:
            return value
        item = self._store.get_item(_checked(catalog), value)
        return item.label if item else value

    def add_item(self, catalog: CatalogName, item: ListItem) -> ListItem:
        with self._store.transaction():
            if self._store.get_item(_checked(catalog), item.value) is not None:
                raise DuplicateCodeError(catalog, item.value)
            self._store.upsert_item(catalog, item)
        self._logger.info("list_item.added", catalog=catalog, value=item.value)
        return item

    def update_item(self, catalog: CatalogName, value: str, item: ListItem) -> ListItem:
        with self._store.transaction():
            item = _keep_published(item, self._get_item(catalog, value))
            if item.value != value and self._store.get_item(catalog, item.value) is not None:
                raise DuplicateCodeError(catalog, item.value)
            if item.value != value:
                self._store.delete_item(catalog, value)
            self._store.upsert_item(catalog, item)
        self._logger.info("list_item.updated", catalog=catalog, value=value, new_value=item.value)
        return item

    def remove_item(self, catalog: CatalogName, value: str) -> None:
        with self._store.transaction():
            self._get_item(catalog, value)
            self._store.delete_item(catalog, value)
        self._logger.info("list_item.removed", catalog=catalog, value=value)

    def set_item_published(self, catalog: CatalogName, value: str, published: bool) -> ListItem:
        with self._store.transaction():
            item = self._get_item(catalog, value).model_copy(update={"published": published})
            self._store.upsert_item(catalog, item)
        return item

    def _get_item(self, catalog: CatalogName, value: str) -> ListItem:
        item = self._store.get_item(_checked(catalog), value)
        if item is None:
            raise ListItemNotFoundError(catalog, value)
        return item


def _keep_published(incoming, current):
    if "published" in incoming.model_fields_set:
        return incoming
    return incoming.model_copy(update={"published": current.published})


def _checked(catalog: str) -> CatalogName:
    if catalog not in CATALOGS:
        raise ValueError(f"Unknown catalog: {catalog!r}; expected one of {', '.join(CATALOGS)}")
    return catalog  # type: ignore[return-value]
