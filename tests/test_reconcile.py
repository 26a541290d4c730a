"""
Sample classification and metadata/count-matrix matching.
"""

import pytest

from cnf_dge.reconcile import (
    Provenance, SampleRecord, SampleMapping, ReconcileReport,
    AlignmentError, EmptyGroupError,
    classify, filter_in_scope, match_to_matrix, verify_alignment,
    require_groups, reconcile,
)

CNF = 'Cutaneous Neurofibroma'
PNF = 'Plexiform Neurofibroma'


@pytest.mark.parametrize('identifier,expected', [
    ('icNF97.2a', Provenance.IMMORTALIZED),
    ('cNF97.2a', Provenance.PRIMARY),
    ('28cNF00', Provenance.PRIMARY),
    ('xyz123', Provenance.OTHER),
    ('iPSC-1', Provenance.IMMORTALIZED),
    ('CNF97.2a', Provenance.OTHER),
    ('IcNF97.2a', Provenance.OTHER),
    (' cNF97.2a', Provenance.OTHER),
    ('28CNF00', Provenance.OTHER),
    ('2cNF00', Provenance.OTHER),
])
def test_classify(identifier, expected):
    assert classify(identifier) is expected


def test_classify_is_total_and_deterministic():
    names = ['', 'i', 'cNF', '28cNF', '28', 'c', '\t', 'ñ', 'icNF' * 50]
    for name in names:
        first = classify(name)
        assert isinstance(first, Provenance)
        assert all(classify(name) is first for _ in range(3))


def test_immortalized_prefix_wins_over_primary():
    # 'i' is checked before 'cNF'
    assert classify('icNF') is Provenance.IMMORTALIZED


def test_record_provenance_is_derived():
    record = SampleRecord('icNF00.10a', CNF)
    assert record.provenance is Provenance.IMMORTALIZED


def test_record_requires_identifier():
    with pytest.raises(ValueError):
        SampleRecord('', CNF)
    with pytest.raises(ValueError):
        SampleRecord(None, CNF)


def test_filter_in_scope_drops_other_and_wrong_category():
    records = [
        SampleRecord('cNF1', CNF),
        SampleRecord('xyz', CNF),
        SampleRecord('icNF1', PNF),
        SampleRecord('icNF2', CNF),
        SampleRecord('28cNF3', CNF),
    ]
    kept = filter_in_scope(records, CNF)

    assert [r.identifier for r in kept] == ['cNF1', 'icNF2', '28cNF3']
    assert all(r.category == CNF for r in kept)
    assert all(r.provenance is not Provenance.OTHER for r in kept)


def test_filter_in_scope_category_is_exact():
    records = [SampleRecord('cNF1', 'cutaneous neurofibroma'), SampleRecord('cNF2', CNF + ' ')]
    assert filter_in_scope(records, CNF) == []


def test_filter_in_scope_preserves_order():
    names = ['icNF9', 'cNF3', 'other', 'cNF1', '28cNF2', 'icNF0']
    records = [SampleRecord(n, CNF) for n in names]
    kept = filter_in_scope(records, CNF)
    assert [r.identifier for r in kept] == ['icNF9', 'cNF3', 'cNF1', '28cNF2', 'icNF0']


def test_filter_in_scope_counts_dropped():
    report = ReconcileReport()
    records = [SampleRecord('cNF1', CNF), SampleRecord('abc', CNF), SampleRecord('cNF2', PNF)]
    filter_in_scope(records, CNF, report)

    assert report.n_input == 3
    assert report.n_wrong_category == 1
    assert report.n_other == 1
    assert report.other == ['abc']
    assert report.n_in_scope == 1


def test_duplicate_identifiers_are_kept_independently():
    records = [SampleRecord('cNF1', CNF, age=10), SampleRecord('cNF1', CNF, age=11)]
    kept = filter_in_scope(records, CNF)
    mapping = match_to_matrix(kept, ['cNF1'])

    assert len(mapping) == 2
    assert mapping.columns == ['cNF1', 'cNF1']


def test_match_partial_overlap(records):
    report = ReconcileReport()
    mapping = match_to_matrix(records, ['cNF1', 'icNF1', 'other'], report)

    assert len(mapping) == 2
    assert mapping.columns == ['cNF1', 'icNF1']
    assert [r.identifier for r in mapping.records] == ['cNF1', 'icNF1']
    assert report.n_unmatched == 1
    assert report.unmatched == ['cNF2']
    assert report.matched_by_group == {'Primary': 1, 'Immortalized': 1}


def test_match_columns_always_in_matrix(records):
    matrix_columns = ['icNF1', 'cNF2']
    mapping = match_to_matrix(records, matrix_columns)
    assert all(column in matrix_columns for column in mapping.columns)


def test_match_round_trip_keeps_record_order(records):
    matrix_columns = list(reversed([r.identifier for r in records]))
    mapping = match_to_matrix(records, matrix_columns)

    assert len(mapping) == len(records)
    assert mapping.records == records
    assert mapping.columns == ['cNF1', 'cNF2', 'icNF1']


def test_match_is_exact_string_equality():
    records = [SampleRecord('cNF1', CNF), SampleRecord('icNF1', CNF)]
    mapping = match_to_matrix(records, ['CNF1', 'icNF1 ', 'cnf1'])
    assert len(mapping) == 0


def test_mapping_is_immutable(records):
    mapping = match_to_matrix(records, ['cNF1'])
    with pytest.raises(AttributeError):
        mapping.pairs = ()
    with pytest.raises(TypeError):
        mapping.pairs[0] = None


def test_verify_alignment_accepts_valid_mapping(records):
    mapping = match_to_matrix(records, ['icNF1', 'cNF2', 'cNF1'])
    verify_alignment(mapping, mapping.columns)


def test_verify_alignment_detects_swapped_entries(records):
    mapping = match_to_matrix(records, ['cNF1', 'cNF2', 'icNF1'])
    (r0, c0), (r1, c1) = mapping[0], mapping[1]
    corrupted = SampleMapping([(r0, c1), (r1, c0)] + list(mapping.pairs[2:]))

    with pytest.raises(AlignmentError) as excinfo:
        verify_alignment(corrupted, corrupted.columns)
    assert excinfo.value.position == 0
    assert excinfo.value.expected == 'cNF1'
    assert excinfo.value.found == 'cNF2'


def test_verify_alignment_detects_reordered_columns(records):
    mapping = match_to_matrix(records, ['cNF1', 'cNF2', 'icNF1'])
    with pytest.raises(AlignmentError):
        verify_alignment(mapping, ['cNF1', 'icNF1', 'cNF2'])


def test_verify_alignment_detects_length_mismatch(records):
    mapping = match_to_matrix(records, ['cNF1', 'cNF2', 'icNF1'])
    with pytest.raises(AlignmentError):
        verify_alignment(mapping, ['cNF1', 'cNF2'])
    with pytest.raises(AlignmentError):
        verify_alignment(mapping, ['cNF1', 'cNF2', 'icNF1', 'icNF1'])


def test_empty_scope_triggers_empty_group_error():
    records = [SampleRecord('abc', CNF), SampleRecord('xyz123', CNF)]
    kept = filter_in_scope(records, CNF)
    assert kept == []

    mapping = match_to_matrix(kept, ['abc', 'xyz123'])
    assert len(mapping) == 0

    with pytest.raises(EmptyGroupError) as excinfo:
        require_groups(mapping)
    assert excinfo.value.group == 'Primary'


def test_require_groups_names_missing_group():
    records = [SampleRecord('cNF1', CNF), SampleRecord('cNF2', CNF)]
    mapping = match_to_matrix(records, ['cNF1', 'cNF2'])

    with pytest.raises(EmptyGroupError, match='Immortalized'):
        require_groups(mapping)


def test_reconcile_report(records):
    mapping, report = reconcile(records + [SampleRecord('x1', CNF)], ['cNF1', 'icNF1'], CNF)

    assert mapping.columns == ['cNF1', 'icNF1']
    assert report.target_category == CNF
    assert report.n_input == 4
    assert report.n_other == 1
    assert report.n_in_scope == 3
    assert report.n_unmatched == 1
    assert report.n_matched == 2
    require_groups(mapping, report=report)


def test_report_summary_lists_dropped_samples(records, capsys):
    _, report = reconcile(records, ['cNF1'], CNF)
    report.print_summary()

    out = capsys.readouterr().out
    assert 'Dropped (not in count matrix): 2' in out
    assert 'cNF2, icNF1' in out
