"""Analyses of ptaflow.

- pta: context-sensitive pointer analysis with on-the-fly call graph
  construction
- graph: call graphs, CHA, intraprocedural and interprocedural CFGs
- dataflow: dataflow solvers and constant propagation
"""
