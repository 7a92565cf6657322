import logging
from collections import deque

from batemanpy.exceptions import CyclicDecayChainError, UnknownNuclideError

logger = logging.getLogger(__name__)


class DecayChainGraph:
    """
    Directed graph parent -> daughter over the nuclides of one decay calculation.

    Nodes are owned by integer index. ``labels[i]`` is the nuclide name of node
    i, ``links[i]`` the indices of its daughters and ``parents[i]`` the indices
    of the nuclides producing it.
    """

    def __init__(self):
        self.labels = []
        self.index = {}
        self.links = []
        self.parents = []

    def __len__(self):
        return len(self.labels)

    def __contains__(self, label):
        return label in self.index

    def add_node(self, label):
        """Add a node if it does not exist yet and return its index."""
        if label in self.index:
            return self.index[label]
        node = len(self.labels)
        self.labels.append(label)
        self.index[label] = node
        self.links.append(set())
        self.parents.append(set())
        return node

    def add_edge(self, parent, daughter):
        p = self.add_node(parent)
        d = self.add_node(daughter)
        self.links[p].add(d)
        self.parents[d].add(p)

    @classmethod
    def from_nuclides(cls, nuclides, roots=None):
        """
        Build the decay graph of a nuclide registry.

        Parameters
        ----------
        nuclides : dict
            Registry name -> Nuclide.
        roots : iterable of str, optional
            Nuclides to start from. Every nuclide reachable by decay from them
            is added. If None, all nuclides of the registry are used.

        Returns
        -------
        DecayChainGraph

        Raises
        ------
        UnknownNuclideError
            If a root or a daughter has no entry in the registry.
        """
        graph = cls()
        open_nuclides = list(nuclides) if roots is None else list(dict.fromkeys(roots))

        for name in open_nuclides:
            if name not in nuclides:
                raise UnknownNuclideError(name)
            graph.add_node(name)

        queue = deque(open_nuclides)
        while queue:
            name = queue.popleft()
            nuclide = nuclides[name]
            if nuclide.stable:
                # stable nuclides are sinks
                continue
            for daughter in nuclide.daughters:
                if not nuclide.decays_to(daughter):
                    continue
                if daughter not in nuclides:
                    raise UnknownNuclideError(daughter, referenced_by=name)
                is_new = daughter not in graph
                graph.add_edge(name, daughter)
                if is_new:
                    queue.append(daughter)

        logger.debug("Decay graph with %d nuclides built", len(graph))
        return graph

    def production_edges(self):
        """Yield every (parent, daughter) pair of names."""
        for parent, links in enumerate(self.links):
            for daughter in sorted(links):
                yield self.labels[parent], self.labels[daughter]

    def sort(self):
        """
        Order the nuclides so that every parent precedes its daughters.

        Leaves (nodes without daughters left) are peeled off pass by pass.
        The leaves of one pass are sorted by name, which makes the order
        deterministic. The concatenation of all passes is reversed at the end.

        Returns
        -------
        list of str

        Raises
        ------
        CyclicDecayChainError
            If nodes remain but none of them is a leaf.
        """
        out_degree = [len(links) for links in self.links]
        leaves = sorted((n for n, deg in enumerate(out_degree) if deg == 0), key=self.labels.__getitem__)
        remaining = len(self.labels)
        peeled = []

        while remaining > 0:
            if not leaves:
                raise CyclicDecayChainError(
                    [self.labels[n] for n, deg in enumerate(out_degree) if deg > 0]
                )
            peeled.extend(self.labels[n] for n in leaves)
            remaining -= len(leaves)

            next_leaves = []
            for leaf in leaves:
                for parent in self.parents[leaf]:
                    out_degree[parent] -= 1
                    if out_degree[parent] == 0:
                        next_leaves.append(parent)
            leaves = sorted(next_leaves, key=self.labels.__getitem__)

        peeled.reverse()
        return peeled
