# ========================
# src/restaurant_insights/ingestion.py
# ========================

"""
Data Ingestion Module

Reads the restaurant export in chunks and loads the country lookup table.
"""

import csv
import logging
from typing import Dict

logger = logging.getLogger(__name__)

# Accepted header spellings for the country lookup file.
LOOKUP_CODE_COLUMNS = ('COUNTRYCODE', 'COUNTRY_CODE', 'CODE')
LOOKUP_NAME_COLUMNS = ('COUNTRY', 'COUNTRY_NAME', 'NAME')

class CSVReader:
    """
    A memory-efficient CSV reader that reads a file in chunks.
    """

    def __init__(self, file_path, encoding='utf-8'):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
            encoding (str): File encoding; the raw export is often latin-1
        """
        self.file_path = file_path
        self.encoding = encoding
        self.header = []
        logger.info(f"Initialized CSVReader for file: {file_path}")

    def read_in_chunks(self, chunk_size):
        """
        A generator that yields a list of dictionaries for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.
        """
        try:
            with open(self.file_path, 'r', newline='', encoding=self.encoding) as f:
                reader = csv.DictReader(f)
                self.header = reader.fieldnames
                logger.info(f"CSV header: {self.header}")

                chunk = []
                row_count = 0

                for row in reader:
                    chunk.append(row)
                    row_count += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                # Yield any remaining rows in the last chunk
                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Total rows read: {row_count}")

        except FileNotFoundError:
            logger.error(f"File '{self.file_path}' was not found")
            raise
        except Exception as e:
            logger.error(f"Error reading CSV file: {e}")
            raise

def load_country_lookup(file_path, encoding='utf-8') -> Dict[str, str]:
    """
    Load the country code -> country name lookup table.

    Header names are matched case-insensitively; codes and names are
    stripped of surrounding whitespace. Rows without a code or a name are
    skipped.

    Args:
        file_path (str): Path to the lookup CSV
        encoding (str): File encoding

    Returns:
        dict: Mapping of country code to country name

    Raises:
        ValueError: If the file has no recognisable code/name columns
    """
    lookup = {}
    with open(file_path, 'r', newline='', encoding=encoding) as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or []
        by_upper = {name.strip().upper(): name for name in fieldnames}

        code_column = next((by_upper[c] for c in LOOKUP_CODE_COLUMNS if c in by_upper), None)
        name_column = next((by_upper[c] for c in LOOKUP_NAME_COLUMNS if c in by_upper), None)
        if code_column is None or name_column is None:
            raise ValueError(
                f"Country lookup '{file_path}' needs a code and a name column, got {fieldnames}"
            )

        for row in reader:
            code = (row.get(code_column) or '').strip()
            name = (row.get(name_column) or '').strip()
            if code and name:
                lookup[code] = name

    logger.info(f"Loaded {len(lookup)} country codes from {file_path}")
    return lookup
