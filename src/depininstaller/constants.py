"""Static values shared across depininstaller."""

DEFAULT_IMAGE_TAG = "ghcr.io/tashigg/tashi-depin-worker:0"

TROUBLESHOOT_LINK = "https://docs.tashi.network/nodes/node-installation/important-notes#troubleshooting"
MANUAL_UPDATE_LINK = "https://docs.tashi.network/nodes/node-installation/important-notes#manual-update"
DOCKER_ROOTLESS_LINK = "https://docs.docker.com/engine/install/linux-postinstall/"
PODMAN_ROOTLESS_LINK = (
    "https://github.com/containers/podman/blob/main/docs/tutorials/rootless_tutorial.md"
)

CONTAINER_NAME = "tashi-depin-worker"
AUTH_VOLUME = "tashi-depin-worker-auth"
AUTH_DIR = "/home/worker/auth"
UPDATE_DOWNLOAD_PATH = "/tmp/tashi-depin-worker"

AGENT_PORT = 39065
LOCAL_API_ADDR = "127.0.0.1"
LOCAL_API_PORT = 9000

RUST_LOG = "info,tashi_depin_worker=debug,tashi_depin_common=debug"

# Exit status the worker's interactive setup reports when the operator interrupts it.
SETUP_CANCELLED_EXIT_CODE = 130

CONNECTIVITY_URL = "https://google.com"
CONNECTIVITY_TIMEOUT = 3
PUBLIC_IP_URL = "https://api.ipify.org"
PUBLIC_IP_TIMEOUT = 5

OS_RELEASE_PATH = "/etc/os-release"
MEMINFO_PATH = "/proc/meminfo"
SUBUID_PATH = "/etc/subuid"
SUBGID_PATH = "/etc/subgid"
DOCKER_SOCKET_PATH = "/var/run/docker.sock"

SUPPORTED_ARCHITECTURES = ("x86_64", "amd64")
EMULATED_PLATFORM = "linux/amd64"

DEFAULT_CONFIG_FILE = ".depininstaller.yml"
