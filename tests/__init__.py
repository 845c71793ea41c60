"""
UGKSim Test Suite

Tests organized by:
- test_state.py: Frame rotation, state conversion, gas model
- test_velocity_space.py: Discrete velocity quadrature
- test_distribution.py: Maxwellian and Shakhov parts
- test_moments.py: Analytic Maxwellian moments
- test_reconstruction.py: Van Leer slopes
- test_flux.py: Micro slopes, time weights, interface and wall fluxes
- test_solver.py: Mesh, flow field and time marching
- test_diagnostics.py: Output of macroscopic fields and residual history
"""
