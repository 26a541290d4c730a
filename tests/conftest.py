import matplotlib
matplotlib.use('Agg')

import pandas as pd
import pytest

from cnf_dge.reconcile import SampleRecord

CNF = 'Cutaneous Neurofibroma'
PNF = 'Plexiform Neurofibroma'


@pytest.fixture
def metadata_df():
    """
    Portal-style metadata: one unclassifiable name, one other tumor type,
    and one primary sample (cNF04.9a) absent from the count matrix.
    """
    return pd.DataFrame({
        'specimenID': ['cNF97.2a', 'icNF97.2a', '28cNF00', 'icNF00.10a',
                       'xyz123', 'cNF04.9a', 'cNF97.2a_pnf'],
        'tumorType': [CNF, CNF, CNF, CNF, CNF, CNF, PNF],
        'individualID': ['NF0097', 'NF0097', 'NF0028', 'NF0000',
                         'NF0999', 'NF0004', 'NF0097'],
        'age': [41, 41, 52, float('nan'), 30, 33, 41],
        'sex': ['female', 'female', 'male', 'male', 'female', 'male', 'female'],
        'assay': ['rnaSeq'] * 7,
    })


@pytest.fixture
def counts_df():
    """Count matrix (genes x samples) whose columns follow a different order."""
    return pd.DataFrame({
        'gene_id': ['ENSG00000196712', 'ENSG00000141510', 'ENSG00000157764', 'ENSG00000133703'],
        'icNF00.10a': [120, 30, 0, 15],
        'cNF97.2a': [80, 45, 2, 20],
        '28cNF00': [95, 50, 1, 18],
        'icNF97.2a': [150, 25, 0, 12],
        'extra_sample': [10, 10, 10, 10],
    })


@pytest.fixture
def records():
    return [
        SampleRecord('cNF1', CNF, individual_id='NF1'),
        SampleRecord('cNF2', CNF, individual_id='NF2'),
        SampleRecord('icNF1', CNF, individual_id='NF1'),
    ]
