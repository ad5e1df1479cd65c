"""Integration tests for kubesmoke.

These tests talk to a real Kubernetes cluster and require a kubeconfig,
either through the KUBECONFIG environment variable or ~/.kube/config.

Tests are marked with @pytest.mark.integration and can be run with:
    pytest tests/integration/ -m integration

To skip integration tests:
    pytest -m "not integration"
"""
