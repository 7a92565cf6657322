"""
Analytic eigen-decomposition of a lower-triangular decay matrix.

For a lower-triangular Lambda the eigenvalues are its diagonal entries, so
Lambda = C * D * inv(C) with D = diag(Lambda). The columns of C and the rows
of inv(C) follow from two recursions over the strictly lower triangle, row by
row in increasing order:

    C[i][j]    = sum_{k=j}^{i-1} Lambda[i][k] * C[k][j] / (Lambda[j][j] - Lambda[i][i])
    invC[i][j] = - sum_{k=j}^{i-1} C[i][k] * invC[k][j]

Both C and inv(C) have a unit diagonal. When two nuclides of a chain share
the same decay constant the denominator vanishes and C[i][j] is set to 0.
This keeps the calculation running but is only an approximation for such
degenerate chains.
"""
import logging

from batemanpy.transition_matrix import TriangularMatrix

logger = logging.getLogger(__name__)


def solve_similarity_transform(transition_matrix):
    """
    Compute C and inv(C) with transition_matrix = C * D * inv(C).

    Parameters
    ----------
    transition_matrix : TriangularMatrix
        Lower-triangular decay matrix.

    Returns
    -------
    tuple
        (C, inv_C), both TriangularMatrix with unit diagonal.
    """
    size = len(transition_matrix)
    c_matrix = TriangularMatrix.identity(size)
    inv_c_matrix = TriangularMatrix.identity(size)
    diagonal = transition_matrix.diagonal()

    for i in range(size):
        # only the non-zero Lambda[i][k], k < i, contribute to row i of C
        lower_row = [(k, value) for k, value in transition_matrix.row_items(i) if k < i]

        for j in range(i):
            total = 0.0
            for k, value in lower_row:
                if k >= j:
                    total += value * c_matrix.get(k, j)
            if total == 0.0:
                continue
            denominator = diagonal[j] - diagonal[i]
            if denominator == 0.0:
                logger.debug("Equal decay constants in rows %d and %d, C[%d][%d] set to 0", j, i, i, j)
                continue
            c_matrix.set(i, j, total / denominator)

        c_row = [(k, value) for k, value in c_matrix.row_items(i) if k < i]
        for j in range(i):
            total = 0.0
            for k, value in c_row:
                if k >= j:
                    total += value * inv_c_matrix.get(k, j)
            inv_c_matrix.set(i, j, -total)

    return c_matrix, inv_c_matrix
