"""
Program model consumed by the analyses: types, classes and the class
hierarchy, the three-address IR, and a builder for constructing programs.
"""
