"""
Data loading utilities for the cNF cell RNA-seq datasets.

This module handles fetching the sample metadata table and the gene
count matrix from the data portal (or a local cache), turning metadata
rows into SampleRecord objects, and producing a count matrix whose
columns are aligned with the metadata rows.
"""

import os
from urllib.request import urlretrieve

import pandas as pd

from .config import (
    DATA_DIR, PORTAL_BASE_URL, METADATA_DATASET, COUNTS_DATASET,
    ID_COLUMN, CATEGORY_COLUMN, INDIVIDUAL_COLUMN, AGE_COLUMN, SEX_COLUMN,
    GENE_COLUMN, TARGET_CATEGORY,
)
from .reconcile import (
    ReconciliationError, SampleRecord, reconcile, require_groups, verify_alignment,
)

TABLE_EXTENSIONS = ('.csv', '.tsv', '.txt')


def _read_table(path, **kwargs):
    sep = ',' if path.endswith('.csv') else '\t'
    return pd.read_csv(path, sep=sep, header=0, **kwargs)


class DataPortal:
    """
    Minimal synchronous client for the data portal.

    Tables are looked up in ``data_dir`` first; when missing and a
    ``base_url`` is configured they are downloaded as
    ``<base_url>/<dataset_id>.csv`` and cached.
    """

    def __init__(self, base_url=PORTAL_BASE_URL, data_dir=DATA_DIR):
        self.base_url = base_url
        self.data_dir = data_dir

    def local_path(self, dataset_id):
        for ext in TABLE_EXTENSIONS:
            path = os.path.join(self.data_dir, dataset_id + ext)
            if os.path.exists(path):
                return path
        return None

    def download(self, dataset_id):
        """Download a dataset into the cache and return its path."""
        if self.base_url is None:
            raise FileNotFoundError(
                f"Dataset '{dataset_id}' not found in {self.data_dir} "
                f"and no portal base URL is configured"
            )
        os.makedirs(self.data_dir, exist_ok=True)
        url = f"{self.base_url.rstrip('/')}/{dataset_id}.csv"
        path = os.path.join(self.data_dir, dataset_id + '.csv')
        print(f"  Downloading {url}")
        urlretrieve(url, path)
        return path

    def fetch(self, dataset_id, **read_kwargs):
        """
        Fetch a dataset as a DataFrame.

        Args:
            dataset_id (str): Dataset identifier (file stem)
            **read_kwargs: Passed on to pd.read_csv

        Returns:
            pd.DataFrame: The raw table
        """
        path = self.local_path(dataset_id)
        if path is None:
            path = self.download(dataset_id)
        return _read_table(path, **read_kwargs)


def read_metadata(portal, dataset_id=METADATA_DATASET, id_column=ID_COLUMN):
    """
    Read the sample metadata table.

    The identifier column is read as text so numeric ids keep the
    exact spelling used in the count matrix header.

    Returns:
        pd.DataFrame: One row per biological sample
    """
    df = portal.fetch(dataset_id, dtype={id_column: str})
    print(f"  [Metadata] {dataset_id}: {df.shape[0]} rows, {df.shape[1]} columns")
    return df


def read_counts(portal, dataset_id=COUNTS_DATASET, gene_column=GENE_COLUMN):
    """
    Read the gene count matrix.

    If ``gene_column`` is absent, the first column is taken to hold
    the gene identifiers and renamed.

    Returns:
        pd.DataFrame: Count matrix (genes x samples) with a gene column
    """
    df = portal.fetch(dataset_id)
    if gene_column not in df.columns:
        first = df.columns[0]
        print(f"  Warning: no '{gene_column}' column, using '{first}' as gene ids")
        df = df.rename(columns={first: gene_column})
    print(f"  [Counts] {dataset_id}: {df.shape[0]} genes, {df.shape[1] - 1} samples")
    return df


def records_from_metadata(df, id_column=ID_COLUMN, category_column=CATEGORY_COLUMN,
                          individual_column=INDIVIDUAL_COLUMN, age_column=AGE_COLUMN,
                          sex_column=SEX_COLUMN):
    """
    Convert metadata rows to SampleRecord objects.

    The identifier and category columns are required; individual, age
    and sex are optional. All other columns are carried as attributes.
    Rows without an identifier are skipped with a warning.

    Args:
        df (pd.DataFrame): Metadata table

    Returns:
        list: SampleRecord objects in table order
    """
    missing = [c for c in (id_column, category_column) if c not in df.columns]
    if missing:
        raise ValueError(f"Metadata is missing required columns: {missing}")

    named = {id_column, category_column, individual_column, age_column, sex_column}
    records = []
    n_skipped = 0

    for row in df.to_dict('records'):
        row = {k: (None if _isna(v) else v) for k, v in row.items()}
        identifier = row[id_column]
        if identifier is None or str(identifier) == '':
            n_skipped += 1
            continue
        category = row[category_column]
        records.append(SampleRecord(
            identifier=str(identifier),
            category=None if category is None else str(category),
            individual_id=row.get(individual_column),
            age=row.get(age_column),
            sex=row.get(sex_column),
            attributes={k: v for k, v in row.items() if k not in named},
        ))

    if n_skipped:
        print(f"  Warning: skipped {n_skipped} metadata rows without '{id_column}'")
    return records


def _isna(value):
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def mapping_to_frame(mapping):
    """
    Build the aligned metadata table for a SampleMapping.

    Returns:
        pd.DataFrame: One row per mapped sample, indexed by sample name,
                      with a 'provenance' column
    """
    rows = []
    for record, column in mapping:
        row = dict(record.attributes)
        row.update({
            'category': record.category,
            'individual_id': record.individual_id,
            'age': record.age,
            'sex': record.sex,
            'provenance': record.provenance.value,
        })
        rows.append(row)

    frame = pd.DataFrame(rows, index=pd.Index(mapping.columns, name='sample'))
    return frame


def load_aligned_data(metadata_df, counts_df, target_category=TARGET_CATEGORY,
                      gene_column=GENE_COLUMN, **column_names):
    """
    Align the count matrix with the in-scope metadata rows.

    This function ensures proper alignment of samples across:
    - RNA-seq count matrix columns
    - Sample metadata rows

    Args:
        metadata_df (pd.DataFrame): Raw metadata table
        counts_df (pd.DataFrame): Count matrix (genes x samples) with gene column
        target_category (str): Tumor type to compare
        gene_column (str): Gene identifier column of counts_df
        **column_names: Overrides for records_from_metadata column names

    Returns:
        tuple: (counts_aligned, metadata_aligned, report)
            - counts_aligned: Count matrix (genes x samples), gene index
            - metadata_aligned: Metadata (samples x fields), sample index
            - report: ReconcileReport with per-stage counts

    Raises:
        EmptyGroupError: If Primary or Immortalized has no matched samples
        AlignmentError: If matrix columns and the mapping disagree
        ReconciliationError: If metadata provenance does not follow the mapping
    """
    records = records_from_metadata(metadata_df, **column_names)
    sample_columns = [c for c in counts_df.columns if c != gene_column]

    mapping, report = reconcile(records, sample_columns, target_category)
    report.print_summary()
    require_groups(mapping, report=report)

    duplicated = pd.Index(mapping.columns)
    duplicated = sorted(set(duplicated[duplicated.duplicated()]))
    if duplicated:
        print(f"  Warning: samples listed more than once in metadata: {duplicated}")

    counts_aligned = counts_df.set_index(gene_column)[mapping.columns]
    metadata_aligned = mapping_to_frame(mapping)

    # Critical alignment check
    verify_alignment(mapping, list(counts_aligned.columns))
    labels = [record.provenance.value for record in mapping.records]
    if list(metadata_aligned['provenance']) != labels:
        raise ReconciliationError(
            "FATAL: aligned metadata provenance does not follow the sample mapping"
        )

    print(f"  [Aligned] Counts shape (genes x samples): {counts_aligned.shape}")
    print(f"  [Aligned] Metadata shape: {metadata_aligned.shape}")

    return counts_aligned, metadata_aligned, report

