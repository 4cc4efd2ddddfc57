"""
Unit tests for model mappings and model-level helpers.
"""

from sqlalchemy import inspect
from sqlalchemy.orm import configure_mappers

from models import Base, Board, User


class TestRelationships:
    def test_no_relationship_uses_noload(self):
        configure_mappers()

        for mapper in Base.registry.mappers:
            for relationship in mapper.relationships:
                assert relationship.lazy != "noload", (
                    f"{mapper.class_.__name__}.{relationship.key}"
                )

    def test_board_author_is_one_way(self):
        assert "boards" not in inspect(User).relationships
        assert inspect(Board).relationships["author"].back_populates is None


class TestSoftDelete:
    def test_mark_deleted_keeps_first_stamp(self, regular_user, make_board):
        board = make_board(regular_user)
        assert board.is_deleted is False

        board.mark_deleted()
        first = board.deleted_at
        board.mark_deleted()

        assert board.is_deleted is True
        assert board.deleted_at == first
