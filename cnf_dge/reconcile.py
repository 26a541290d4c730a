"""
Sample reconciliation between portal metadata and the count matrix.

The metadata table and the count matrix are curated independently, so
before any statistics can run this module:
- classifies each sample as Primary / Immortalized / Other from its name
- keeps the in-scope samples for one tumor type
- matches each kept sample to a count-matrix column by exact name
- verifies that metadata rows and matrix columns line up one-to-one

Matching is exact string equality. Names that differ only by case or
whitespace will NOT match.
"""

from dataclasses import dataclass, field
from enum import Enum

from .config import PROVENANCE_RULES


class Provenance(Enum):
    PRIMARY = 'Primary'
    IMMORTALIZED = 'Immortalized'
    OTHER = 'Other'


COMPARISON_GROUPS = (Provenance.PRIMARY, Provenance.IMMORTALIZED)


class ReconciliationError(ValueError):
    """Base class for fatal reconciliation failures."""


class EmptyGroupError(ReconciliationError):
    """A comparison group has no samples left after matching."""

    def __init__(self, group, report=None):
        self.group = group
        self.report = report
        msg = f"FATAL: no '{group}' samples left after matching"
        if report is not None:
            msg += f" ({report.describe()})"
        super().__init__(msg)


class AlignmentError(ReconciliationError):
    """Metadata row order and matrix column order disagree."""

    def __init__(self, position, expected, found):
        self.position = position
        self.expected = expected
        self.found = found
        super().__init__(
            f"FATAL: sample order mismatch at position {position}: "
            f"metadata row is {expected!r} but matrix column is {found!r}"
        )


def classify(identifier):
    """
    Classify a sample name by provenance.

    Rules are evaluated in order and the first matching prefix wins:
    names starting with 'i' are immortalized lines, names starting with
    'cNF' or '28cNF' are primary cells, anything else is Other.

    Args:
        identifier (str): Sample name as recorded in the metadata

    Returns:
        Provenance: Classification of the sample
    """
    for prefixes, label in PROVENANCE_RULES:
        if identifier.startswith(prefixes):
            return Provenance(label)
    return Provenance.OTHER


@dataclass(frozen=True)
class SampleRecord:
    identifier: str
    category: str
    individual_id: object = None
    age: object = None
    sex: object = None
    attributes: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not isinstance(self.identifier, str) or not self.identifier:
            raise ValueError(f"Sample identifier must be a non-empty string, got {self.identifier!r}")

    @property
    def provenance(self):
        return classify(self.identifier)


class SampleMapping:
    """
    Ordered, immutable pairing of metadata records with matrix columns.

    The order of ``pairs`` is the order used to index the count matrix.
    """

    def __init__(self, pairs):
        self._pairs = tuple(pairs)

    @property
    def pairs(self):
        return self._pairs

    @property
    def records(self):
        return [record for record, _ in self._pairs]

    @property
    def columns(self):
        return [column for _, column in self._pairs]

    def count(self, provenance):
        return sum(1 for record, _ in self._pairs if record.provenance is provenance)

    def __len__(self):
        return len(self._pairs)

    def __iter__(self):
        return iter(self._pairs)

    def __getitem__(self, i):
        return self._pairs[i]

    def __repr__(self):
        return f"SampleMapping(n={len(self)}, columns={self.columns})"


@dataclass
class ReconcileReport:
    """Stage-by-stage counts of samples kept and dropped."""

    target_category: str = None
    n_input: int = 0
    n_wrong_category: int = 0
    n_other: int = 0
    other: list = field(default_factory=list)
    n_in_scope: int = 0
    n_unmatched: int = 0
    unmatched: list = field(default_factory=list)
    n_matched: int = 0
    matched_by_group: dict = field(default_factory=dict)

    def describe(self):
        groups = ', '.join(f"{k}={v}" for k, v in self.matched_by_group.items())
        return (f"input={self.n_input}, wrong category={self.n_wrong_category}, "
                f"unclassified={self.n_other}, in scope={self.n_in_scope}, "
                f"unmatched={self.n_unmatched}, matched={self.n_matched}"
                + (f" [{groups}]" if groups else ''))

    def print_summary(self):
        print(f"  [Reconcile] Target category: {self.target_category}")
        print(f"  [Reconcile] Input samples: {self.n_input}")
        print(f"  [Reconcile] Dropped (other category): {self.n_wrong_category}")
        print(f"  [Reconcile] Dropped (unclassified name): {self.n_other}")
        if self.other:
            print(f"    {', '.join(self.other)}")
        print(f"  [Reconcile] In scope: {self.n_in_scope}")
        print(f"  [Reconcile] Dropped (not in count matrix): {self.n_unmatched}")
        if self.unmatched:
            print(f"    {', '.join(self.unmatched)}")
        print(f"  [Reconcile] Matched: {self.n_matched}")
        for group, n in self.matched_by_group.items():
            print(f"    {group}: {n}")


def filter_in_scope(records, target_category, report=None):
    """
    Keep Primary and Immortalized samples of one tumor type.

    Input order is preserved. An empty result is not an error.

    Args:
        records (iterable): SampleRecord objects
        target_category (str): Required value of ``category`` (exact match)
        report (ReconcileReport): Optional report to fill with counts

    Returns:
        list: In-scope SampleRecord objects
    """
    kept = []
    for record in records:
        if report is not None:
            report.n_input += 1
        if record.category != target_category:
            if report is not None:
                report.n_wrong_category += 1
            continue
        if record.provenance is Provenance.OTHER:
            if report is not None:
                report.n_other += 1
                report.other.append(record.identifier)
            continue
        kept.append(record)

    if report is not None:
        report.target_category = target_category
        report.n_in_scope = len(kept)
    return kept


def match_to_matrix(records, matrix_columns, report=None):
    """
    Pair each record with the count-matrix column of the same name.

    Records whose identifier is not a column are dropped, not raised.
    The result follows record order, not matrix column order.

    Args:
        records (iterable): In-scope SampleRecord objects
        matrix_columns (sequence): Column names of the count matrix
        report (ReconcileReport): Optional report to fill with counts

    Returns:
        SampleMapping: Matched (record, column) pairs
    """
    available = frozenset(matrix_columns)
    pairs = []
    for record in records:
        if record.identifier in available:
            pairs.append((record, record.identifier))
        elif report is not None:
            report.n_unmatched += 1
            report.unmatched.append(record.identifier)

    mapping = SampleMapping(pairs)
    if report is not None:
        report.n_matched = len(mapping)
        report.matched_by_group = {
            group.value: mapping.count(group) for group in COMPARISON_GROUPS
        }
    return mapping


def verify_alignment(mapping, selected_columns):
    """
    Check that matrix columns line up with metadata rows one-to-one.

    Args:
        mapping (SampleMapping): Mapping used to select the columns
        selected_columns (sequence): Column names in the order actually
                                     selected from the matrix

    Raises:
        AlignmentError: On the first position where they differ, or if
                        the lengths differ
    """
    expected = [record.identifier for record in mapping.records]
    found = list(selected_columns)

    for i, (exp, col) in enumerate(zip(expected, found)):
        if exp != col:
            raise AlignmentError(i, exp, col)

    if len(expected) != len(found):
        i = min(len(expected), len(found))
        raise AlignmentError(
            i,
            expected[i] if i < len(expected) else None,
            found[i] if i < len(found) else None,
        )


def require_groups(mapping, groups=COMPARISON_GROUPS, report=None):
    """
    Fail if any comparison group has no matched samples.

    Raises:
        EmptyGroupError: Naming the first empty group
    """
    for group in groups:
        if mapping.count(group) == 0:
            raise EmptyGroupError(group.value, report)


def reconcile(records, matrix_columns, target_category):
    """
    Classify, scope and match samples in one pass.

    Args:
        records (iterable): SampleRecord objects from the metadata table
        matrix_columns (sequence): Column names of the count matrix
        target_category (str): Tumor type to keep

    Returns:
        tuple: (SampleMapping, ReconcileReport)
    """
    report = ReconcileReport()
    in_scope = filter_in_scope(records, target_category, report)
    mapping = match_to_matrix(in_scope, matrix_columns, report)
    return mapping, report
