"""Dataflow analysis framework and its constant propagation client."""
