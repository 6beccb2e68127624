"""
End-to-end ingestion: raw file → scored customers → store.
"""
import random

import pytest
from prometheus_client import REGISTRY

from app.core.errors import FileReadError, FileTooLargeError, StoreError, UnsupportedFileTypeError
from app.scoring.risk import RiskStatus
from app.services.ingestion_service import build_batch, ingest_upload, validate_upload
from app.services.store import SqlAlchemyPortfolioStore
from tests.helpers import FixedRandom, MaxRandom

HEADER = "name,email,phone,outstanding_amount,days_overdue"
MB = 1024 * 1024


class TestScenarios:
    def test_scenario_a_high_risk_row(self):
        batch = build_batch(f"{HEADER}\nAlice,a@x.com,555-1,12000,95", "owner-1", random.Random())
        alice = batch.customers[0]
        assert alice.name == "Alice"
        assert alice.outstanding_amount == 12000
        assert alice.days_overdue == 95
        assert 70 <= alice.risk_score <= 99
        assert alice.status == "high_risk"

    def test_scenario_a_all_random_draws(self):
        for draw in range(30):
            c = build_batch(f"{HEADER}\nAlice,a@x.com,555-1,12000,95", "o", FixedRandom(draw)).customers[0]
            assert c.risk_score == 70 + draw
            assert c.status == RiskStatus.HIGH_RISK.value

    def test_scenario_b_blank_numbers_always_low_risk(self):
        for draw in range(30):
            batch = build_batch(f"{HEADER}\nBob,,,,", "o", FixedRandom(draw))
            bob = batch.customers[0]
            assert bob.outstanding_amount == 0
            assert bob.days_overdue == 0
            assert 0 <= bob.risk_score <= 29
            assert bob.status == "low_risk"

    def test_scenario_b_defaults_reported(self):
        batch = build_batch(f"{HEADER}\nBob,,,,", "o", FixedRandom(0))
        assert batch.report.field_default_count == 2
        assert batch.report.flagged_rows[0].name == "Bob"
        assert batch.report.flagged_rows[0].defaulted_fields == ["outstanding_amount", "days_overdue"]

    def test_scenario_c_short_row_dropped(self):
        text = f"{HEADER}\nAlice,a@x.com,555-1,12000,95\nShort,s@x.com,555-2\nCarl,c@x.com,555-3,10,1"
        batch = build_batch(text, "o", random.Random())
        assert [c.name for c in batch.customers] == ["Alice", "Carl"]
        assert batch.report.inserted_count == 2
        assert batch.report.skipped_count == 1


class TestBatch:
    def test_every_record_stamped_with_owner(self):
        text = f"{HEADER}\nA,,,1,1\nB,,,2,2"
        batch = build_batch(text, "owner-42", random.Random(), upload_id="up-1")
        assert {c.owner_id for c in batch.customers} == {"owner-42"}
        assert {c.upload_id for c in batch.customers} == {"up-1"}
        assert len({c.id for c in batch.customers}) == 2

    def test_default_name_uses_row_index(self):
        batch = build_batch(f"{HEADER}\n,,,1,1\n,,,2,2", "o", random.Random())
        assert [c.name for c in batch.customers] == ["Customer 1", "Customer 2"]

    def test_extreme_values_clamped(self):
        batch = build_batch(f"{HEADER}\nX,,,1000000000,1000000", "o", MaxRandom())
        assert batch.customers[0].risk_score == 99

    def test_empty_file(self):
        batch = build_batch("", "o", random.Random())
        assert batch.customers == []
        assert batch.report.inserted_count == 0


class TestValidateUpload:
    def test_csv_extension_accepted(self):
        validate_upload("portfolio.CSV", "application/octet-stream", 10, MB)

    def test_csv_mime_accepted(self):
        validate_upload("export", "text/csv", 10, MB)

    def test_wrong_type_rejected(self):
        with pytest.raises(UnsupportedFileTypeError):
            validate_upload("portfolio.xlsx", "application/vnd.ms-excel", 10, MB)

    def test_oversized_rejected(self):
        with pytest.raises(FileTooLargeError):
            validate_upload("portfolio.csv", "text/csv", 10 * MB + 1, 10 * MB)


class FailingStore:
    """Store double whose bulk insert always fails."""

    def __init__(self):
        self.rolled_back = False
        self.metadata_inserted = False

    async def insert_customers(self, batch):
        raise StoreError("insert_customers", "connection reset")

    async def insert_upload_metadata(self, meta):
        self.metadata_inserted = True
        return meta

    async def commit(self):
        pass

    async def rollback(self):
        self.rolled_back = True


class TestIngestUpload:
    async def test_persists_customers_and_metadata(self, db_session):
        store = SqlAlchemyPortfolioStore(db_session)
        raw = f"{HEADER}\nAlice,a@x.com,555-1,12000,95\nShort,1\nBob,,,,".encode()

        outcome = await ingest_upload(
            store, file_name="p.csv", content_type="text/csv", raw=raw,
            owner_id="owner-1", rng=random.Random(7), max_bytes=MB,
        )

        assert outcome.report.inserted_count == 2
        assert outcome.report.skipped_count == 1
        assert outcome.message == "Successfully uploaded 2 customer records!"
        assert outcome.upload.records_processed == 2
        assert outcome.upload.processing_status == "completed"

        stored = await store.query_customers("owner-1")
        assert len(stored) == 2
        assert stored[0].risk_score >= stored[1].risk_score
        assert {c.upload_id for c in stored} == {outcome.upload.id}

    async def test_store_failure_is_single_error(self):
        store = FailingStore()
        with pytest.raises(StoreError, match="connection reset"):
            await ingest_upload(
                store, file_name="p.csv", content_type="text/csv", raw=f"{HEADER}\nA,,,1,1".encode(),
                owner_id="o", rng=random.Random(), max_bytes=MB,
            )
        assert store.rolled_back
        assert not store.metadata_inserted

    async def test_rejected_before_parsing(self):
        store = FailingStore()
        with pytest.raises(UnsupportedFileTypeError):
            await ingest_upload(
                store, file_name="p.txt", content_type="text/plain", raw=b"x",
                owner_id="o", rng=random.Random(), max_bytes=MB,
            )
        assert not store.rolled_back

    async def test_undecodable_file(self):
        with pytest.raises(FileReadError):
            await ingest_upload(
                FailingStore(), file_name="p.csv", content_type="text/csv", raw=b"\xff\xfe\xfa",
                owner_id="o", rng=random.Random(), max_bytes=MB,
            )

    async def test_bom_tolerated(self, db_session):
        store = SqlAlchemyPortfolioStore(db_session)
        raw = ("\ufeff" + f"{HEADER}\nAlice,,,1,1").encode("utf-8")
        outcome = await ingest_upload(
            store, file_name="p.csv", content_type="text/csv", raw=raw,
            owner_id="o", rng=random.Random(), max_bytes=MB,
        )
        stored = await store.query_customers("o")
        assert outcome.report.inserted_count == 1
        assert stored[0].name == "Alice"


class TestMetrics:
    """Score and defaulted-field metrics only move once a batch is committed."""

    @staticmethod
    def _score_count():
        return REGISTRY.get_sample_value("portfolio_risk_score_count") or 0.0

    @staticmethod
    def _defaulted(field_name):
        return REGISTRY.get_sample_value(
            "portfolio_fields_defaulted_total", {"field": field_name}
        ) or 0.0

    def test_build_batch_records_nothing(self):
        scores, defaults = self._score_count(), self._defaulted("outstanding_amount")
        batch = build_batch(f"{HEADER}\nA,,,abc,1\nB,,,5,5", "o", random.Random())
        assert len(batch.customers) == 2
        assert self._score_count() == scores
        assert self._defaulted("outstanding_amount") == defaults

    async def test_failed_store_records_nothing(self):
        scores, defaults = self._score_count(), self._defaulted("days_overdue")
        with pytest.raises(StoreError):
            await ingest_upload(
                FailingStore(), file_name="p.csv", content_type="text/csv",
                raw=f"{HEADER}\nA,,,1,xyz".encode(),
                owner_id="o", rng=random.Random(), max_bytes=MB,
            )
        assert self._score_count() == scores
        assert self._defaulted("days_overdue") == defaults

    async def test_committed_upload_records_scores_and_defaults(self, db_session):
        scores, defaults = self._score_count(), self._defaulted("days_overdue")
        await ingest_upload(
            SqlAlchemyPortfolioStore(db_session), file_name="p.csv", content_type="text/csv",
            raw=f"{HEADER}\nA,,,1,xyz\nB,,,2,2".encode(),
            owner_id="o", rng=random.Random(), max_bytes=MB,
        )
        assert self._score_count() == scores + 2
        assert self._defaulted("days_overdue") == defaults + 1


class TestStoreOrdering:
    async def test_unknown_ordering_rejected(self, db_session):
        store = SqlAlchemyPortfolioStore(db_session)
        with pytest.raises(ValueError, match="Unsupported ordering"):
            await store.query_customers("o", order_by="name asc")
