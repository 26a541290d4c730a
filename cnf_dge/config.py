"""
Configuration settings for the cNF differential expression pipeline.

This module centralizes dataset identifiers, metadata column names and
analysis thresholds so a run can be reproduced or retargeted easily.
"""

# =============================================================================
# DATA PORTAL
# =============================================================================
# Base URL of the portal export area. When None, datasets are read only
# from DATA_DIR (place the exported tables there by hand).
PORTAL_BASE_URL = None

# Dataset IDs (file stem of each exported table)
METADATA_DATASET = 'cnf_cell_sample_metadata'
COUNTS_DATASET = 'cnf_cell_gene_counts'

# Local cache of downloaded tables
DATA_DIR = 'data'

# =============================================================================
# METADATA COLUMNS
# =============================================================================
ID_COLUMN = 'specimenID'
CATEGORY_COLUMN = 'tumorType'
INDIVIDUAL_COLUMN = 'individualID'
AGE_COLUMN = 'age'
SEX_COLUMN = 'sex'

# Gene identifier column of the count matrix (genes x samples)
GENE_COLUMN = 'gene_id'

# =============================================================================
# SAMPLE SELECTION
# =============================================================================
TARGET_CATEGORY = 'Cutaneous Neurofibroma'

# Ordered (prefixes, provenance) rules; first match wins.
# Names matching no rule are classified 'Other' and excluded.
PROVENANCE_RULES = [
    (('i',), 'Immortalized'),
    (('cNF', '28cNF'), 'Primary'),
]

# =============================================================================
# DIFFERENTIAL EXPRESSION
# =============================================================================
DESIGN_FACTOR = 'provenance'
REFERENCE_LEVEL = 'Primary'
TEST_LEVEL = 'Immortalized'

# Adjusted p-value and |log2 fold change| cutoffs for significant genes
ALPHA = 0.05
L2FC = 1.0

# Low count filter: (count_threshold, proportion_threshold)
# Removes genes with counts < 10 in more than 90% of samples
LOWCOUNT = (10, 0.9)

# =============================================================================
# ENRICHMENT
# =============================================================================
GENE_SETS = [
    'GO_Biological_Process_2021',
    'KEGG_2021_Human',
    'MSigDB_Hallmark_2020',
]
ORGANISM = 'human'
TOP_N_TERMS = 10

# =============================================================================
# VISUALIZATION
# =============================================================================
CLASS_COLORS = {
    'Primary': 'navy',
    'Immortalized': 'red',
}
N_HEATMAP_GENES = 50

# Plot DPI for saved figures
PLOT_DPI = 300

# =============================================================================
# OUTPUT
# =============================================================================
RESULTS_DIR = 'results'


def print_config():
    """Print current configuration settings."""
    print("=" * 60)
    print("CURRENT CONFIGURATION")
    print("=" * 60)
    print(f"Portal base URL: {PORTAL_BASE_URL}")
    print(f"Metadata dataset: {METADATA_DATASET}")
    print(f"Counts dataset: {COUNTS_DATASET}")
    print(f"Data dir: {DATA_DIR}")
    print(f"Target category: {TARGET_CATEGORY}")
    print(f"Provenance rules: {PROVENANCE_RULES}")
    print(f"Contrast: {DESIGN_FACTOR} {TEST_LEVEL} vs {REFERENCE_LEVEL}")
    print(f"DESeq2 alpha: {ALPHA}")
    print(f"Log2 fold change: {L2FC}")
    print(f"Low count filter: {LOWCOUNT}")
    print(f"Gene sets: {GENE_SETS}")
    print(f"Results dir: {RESULTS_DIR}")
    print("=" * 60)
