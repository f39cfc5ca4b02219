"""
Podboard - Kubernetes Pod Dashboard.

Podboard is a lightweight read/write proxy between a web UI and one or more
Kubernetes clusters. It lists namespaces and pods, filters pods by label
(including regex matching with the `=~` operator), and deletes pods.

Key Features:
- Multi-cluster: every cluster in the kubeconfig is selectable per request
- In-cluster mode when running as a workload with a service account
- Detailed pod status (CrashLoopBackOff, ImagePullBackOff, Terminating, ...)
- Regex label selectors, e.g. `app=~nginx.*,env=dev|staging`
- Pod deletion

Example:
    Local development, using ~/.kube/config:
    ```bash
    podboard serve
    ```

    Listening on a specific address:
    ```bash
    podboard serve --bind-address=0.0.0.0:8080
    ```
"""

__all__ = ["__version__"]
__version__ = "0.0.1"
