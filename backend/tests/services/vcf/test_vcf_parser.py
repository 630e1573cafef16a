"""
Unit tests for VCF header validation, record parsing and genotype resolution.
"""

from dataclasses import FrozenInstanceError

import pytest

from app.services.vcf.parser import (
    SampleCountMismatch,
    VariantRecord,
    VcfParseError,
    iter_records,
    parse_header,
    parse_record,
    resolve_replacement,
)

HEADER = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\tS2"


async def lines_of(*lines):
    for line in lines:
        yield line


class TestParseHeader:

    def test_valid_header(self):
        header = parse_header(HEADER, ["alice", "bob"])
        assert header.sample_columns == ("S1", "S2")
        assert header.sample_count == 2
        assert header.positions["REF"] == 3

    def test_sample_count_mismatch(self):
        """2 declared names but 3 genotype columns."""
        with pytest.raises(SampleCountMismatch) as excinfo:
            parse_header(HEADER + "\tS3", ["alice", "bob"])
        assert excinfo.value.expected == 2
        assert excinfo.value.found == 3
        assert str(excinfo.value) == "Found 3 samples, but 2 names were given."

    def test_mismatch_is_a_parse_error(self):
        with pytest.raises(VcfParseError):
            parse_header(HEADER, ["only-one"])

    def test_missing_format_column(self):
        with pytest.raises(VcfParseError, match="FORMAT"):
            parse_header("#CHROM\tPOS\tID\tREF\tALT\tS1", ["S1"])


class TestParseRecord:

    @pytest.fixture
    def header(self):
        return parse_header(HEADER, ["alice", "bob"])

    def test_named_fields(self, header):
        record = parse_record("chr1\t100\trs1\tAT\tA,--\t50\tPASS\t.\tGT\t1/1\t0|1", header)
        assert record == VariantRecord(
            chromosome="chr1",
            position=100,
            reference="AT",
            alternates=("A", "--"),
            samples=("1/1", "0|1"),
        )

    def test_record_is_immutable(self, header):
        record = parse_record("chr1\t5\t.\tA\tG\t.\t.\t.\tGT\t0\t1", header)
        with pytest.raises(FrozenInstanceError):
            record.position = 6

    def test_missing_columns(self, header):
        with pytest.raises(VcfParseError, match="expected 11 columns"):
            parse_record("chr1\t100\trs1\tA", header)

    def test_non_integer_position(self, header):
        with pytest.raises(VcfParseError, match="POS"):
            parse_record("chr1\tabc\t.\tA\tG\t.\t.\t.\tGT\t0\t1", header)

    def test_position_must_be_positive(self, header):
        with pytest.raises(VcfParseError):
            parse_record("chr1\t0\t.\tA\tG\t.\t.\t.\tGT\t0\t1", header)

    def test_empty_reference(self, header):
        with pytest.raises(VcfParseError, match="REF"):
            parse_record("chr1\t7\t.\t\tG\t.\t.\t.\tGT\t0\t1", header)


class TestResolveReplacement:

    @pytest.mark.parametrize(
        "call,expected",
        [
            (".", None),
            ("./.", None),
            ("0", "AT"),
            ("0/1", "AT"),
            ("1", "A"),
            ("1|0", "A"),
            ("2:35:20", "ATT"),
        ],
    )
    def test_leading_locus(self, call, expected):
        assert resolve_replacement(call, "AT", ("A", "ATT")) == expected

    def test_alternate_out_of_range(self):
        with pytest.raises(VcfParseError, match="alternate 3"):
            resolve_replacement("3", "A", ("G", "T"))

    def test_unrecognized_token(self):
        with pytest.raises(VcfParseError):
            resolve_replacement("x/1", "A", ("G",))


class TestIterRecords:

    def test_skips_comments_and_blank_lines(self, drain):
        records = drain(iter_records(
            lines_of(
                "##fileformat=VCFv4.2",
                "##contig=<ID=chr1>",
                HEADER,
                "",
                "chr1\t10\t.\tA\tG\t.\t.\t.\tGT\t0\t1",
                "##late comment",
                "chr1\t12\t.\tC\tT\t.\t.\t.\tGT\t1\t.",
            ),
            ["alice", "bob"],
        ))
        assert [r.position for r in records] == [10, 12]
        assert records[1].samples == ("1", ".")

    def test_header_mismatch_fails_before_records(self, drain):
        with pytest.raises(SampleCountMismatch):
            drain(iter_records(
                lines_of(HEADER, "chr1\t10\t.\tA\tG\t.\t.\t.\tGT\t0\t1"),
                ["alice"],
            ))

    def test_missing_header(self, drain):
        with pytest.raises(VcfParseError, match="missing #CHROM header"):
            drain(iter_records(lines_of("##fileformat=VCFv4.2"), ["alice"]))
