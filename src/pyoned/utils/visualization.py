"""
Visualization tools for PyOneD solutions
"""
import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Sequence

from ..core.container import OneDim
from ..core.base import DomainType
from ..flow.base import FlowDomain


class SolutionVisualizer:
    """
    Plots of a solution vector laid out by a ``OneDim`` container
    """
    def __init__(self, sim: OneDim):
        self.sim = sim
        self.fig = None

    def _flows(self):
        return [d for d in self.sim.domains if isinstance(d, FlowDomain)]

    def plot_solution(self, x: np.ndarray, components: Sequence[str] = ('T',)):
        """
        Plot flow profiles of the named components, marking boundary points

        Args:
            x: Global unknown vector
            components: Flow component names (e.g. 'T', 'velocity', 'H2')
        """
        self.fig, axes = plt.subplots(len(components), 1,
                                      figsize=(10, 3 * len(components)), squeeze=False)
        self.fig.suptitle('Solution')

        for ax, name in zip(axes[:, 0], components):
            for flow in self._flows():
                n = flow.component_index(name)
                xl = flow.local(x)
                z = flow.grid * 1000  # mm
                values = xl[n::flow.n_components]
                ax.plot(z, values, '-', label=flow.id or 'flow')

                # Boundary points sit at the flow ends
                for neighbor, j in ((flow.left(), 0), (flow.right(), flow.n_points - 1)):
                    if neighbor is None or neighbor.domain_type == DomainType.Empty:
                        continue
                    ax.plot(z[j], values[j], 'ko')
                    ax.annotate(neighbor.domain_type.value, (z[j], values[j]),
                                textcoords='offset points', xytext=(4, 4))
            ax.set_ylabel(name)
            ax.grid(True)

        axes[-1, 0].set_xlabel('Position [mm]')
        plt.tight_layout()
        return self.fig

    def plot_coverages(self, x: np.ndarray, ax: Optional[plt.Axes] = None):
        """Bar chart of the coverages of every reacting surface"""
        if ax is None:
            self.fig, ax = plt.subplots(figsize=(8, 4))
        surfaces = [d for d in self.sim.domains
                    if d.domain_type == DomainType.ReactingSurface]
        for surf in surfaces:
            xl = surf.local(x)
            names = [surf.component_name(n) for n in range(1, surf.n_components)]
            ax.bar(names, xl[1:], label=surf.id or 'surface')
        ax.set_ylabel('Coverage')
        ax.legend()
        ax.grid(True)
        return ax.figure
