import logging
import math

import numpy as np
import scipy.sparse as sp

logger = logging.getLogger(__name__)


class TriangularMatrix:
    """
    Square lower-triangular matrix stored as sparse rows.

    Unset cells and cells above the diagonal read as 0. Every non-finite value
    written into the matrix (e.g. from a malformed half-life) is stored as 0.
    """

    def __init__(self, size):
        self.size = size
        self.rows = [dict() for _ in range(size)]

    def __len__(self):
        return self.size

    def get(self, row, col):
        if row < col:
            return 0.0
        return self.rows[row].get(col, 0.0)

    def set(self, row, col, value):
        value = float(value)
        if not math.isfinite(value):
            logger.debug("Non-finite value %s at (%d, %d) replaced by 0", value, row, col)
            value = 0.0
        if row < col:
            if value != 0.0:
                raise ValueError(
                    f"Cannot set ({row}, {col}) to {value}: the matrix is lower-triangular."
                )
            return
        if value == 0.0:
            self.rows[row].pop(col, None)
        else:
            self.rows[row][col] = value

    def add(self, row, col, value):
        self.set(row, col, self.get(row, col) + value)

    def row_items(self, row):
        """(col, value) pairs of the non-zero cells of a row."""
        return self.rows[row].items()

    def diagonal(self):
        return np.array([self.get(i, i) for i in range(self.size)], dtype=float)

    def to_dense(self):
        matrix = np.zeros((self.size, self.size))
        for i, row in enumerate(self.rows):
            for j, value in row.items():
                matrix[i, j] = value
        return matrix

    def to_csr(self):
        row_index, col_index, values = [], [], []
        for i, row in enumerate(self.rows):
            for j, value in row.items():
                row_index.append(i)
                col_index.append(j)
                values.append(value)
        return sp.csr_matrix(
            (np.asarray(values, dtype=float), (np.asarray(row_index, dtype=int), np.asarray(col_index, dtype=int))),
            shape=(self.size, self.size)
        )

    @classmethod
    def identity(cls, size):
        matrix = cls(size)
        for i in range(size):
            matrix.rows[i][i] = 1.0
        return matrix


def build_transition_matrix(ordered_nuclides, nuclides):
    """
    Build the decay/production rate matrix of an ordered list of nuclides.

    Parameters
    ----------
    ordered_nuclides : list of str
        Nuclide names, every parent before its daughters.
    nuclides : dict
        Registry name -> Nuclide.

    Returns
    -------
    TriangularMatrix
        Lambda[i, i] = -lambda_i and Lambda[j, i] = lambda_i * fraction(i -> j).
    """
    index = {name: i for i, name in enumerate(ordered_nuclides)}
    transition_matrix = TriangularMatrix(len(ordered_nuclides))

    for i, name in enumerate(ordered_nuclides):
        nuclide = nuclides[name]
        decay_constant = nuclide.decay_constant
        transition_matrix.set(i, i, -decay_constant)

        if nuclide.stable:
            continue
        for daughter in nuclide.daughters:
            if daughter not in index or not nuclide.decays_to(daughter):
                continue
            # several entries for the same daughter add up
            transition_matrix.add(index[daughter], i, decay_constant * nuclide.branching_fraction(daughter))

    return transition_matrix
