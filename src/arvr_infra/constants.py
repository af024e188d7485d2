# ==========================================
# 1. Environment Variables
# ==========================================
ENV_SUBSCRIPTION_ID = "AZURE_SUBSCRIPTION_ID"
ENV_DB_PASSWORD = "DB_PASSWORD"

REQUIRED_ENV_VARS = [
    ENV_SUBSCRIPTION_ID,
    ENV_DB_PASSWORD,
]

DEFAULT_ENV_FILE = ".env"

# ==========================================
# 2. Overridable Defaults
# ==========================================
DEFAULT_RESOURCE_GROUP_NAME = "ar-vr-ecommerce-rg"
DEFAULT_LOCATION = "eastus"
DEFAULT_STORAGE_ACCOUNT_NAME = "arvrecommerceassets"
DEFAULT_DB_USERNAME = "adminuser"

# ==========================================
# 3. Retry Policy
# ==========================================
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 5.0

# ==========================================
# 4. Network
# ==========================================
VNET_NAME = "ar-vr-ecommerce-vnet"
VNET_ADDRESS_SPACE = "10.0.0.0/16"
APP_SUBNET_NAME = "app-subnet"
APP_SUBNET_PREFIX = "10.0.1.0/24"
DB_SUBNET_NAME = "db-subnet"
DB_SUBNET_PREFIX = "10.0.2.0/24"

# ==========================================
# 5. Compute Cluster (AKS)
# ==========================================
AKS_NAME = "ar-vr-ecommerce-aks"
AKS_DNS_PREFIX = "arvrecommerce"
AKS_POOL_NAME = "default"
AKS_NODE_COUNT = 2
AKS_VM_SIZE = "Standard_DS2_v2"
AKS_POOL_MODE = "System"
AKS_OS_TYPE = "Linux"
AKS_IDENTITY_TYPE = "SystemAssigned"

# ==========================================
# 6. Database (PostgreSQL Flexible Server)
# ==========================================
DB_SERVER_NAME = "ar-vr-ecommerce-db"
DB_VERSION = "13"
DB_SKU_NAME = "Standard_D2ds_v4"
DB_SKU_TIER = "GeneralPurpose"
DB_STORAGE_SIZE_GB = 32

# ==========================================
# 7. Storage
# ==========================================
STORAGE_SKU = "Standard_LRS"
STORAGE_KIND = "StorageV2"
STORAGE_CONTAINER_NAME = "assets"
STORAGE_CONTAINER_ACCESS = "None"
BLOB_HOST_SUFFIX = "blob.core.windows.net"

# ==========================================
# 8. CDN
# ==========================================
CDN_PROFILE_NAME = "arvrecommercecdn"
CDN_ENDPOINT_NAME = "arvrecommerceendpoint"
CDN_SKU = "Standard_Microsoft"
CDN_ORIGIN_NAME = "storageorigin"

# ==========================================
# 9. Step Names
# ==========================================
STEP_RESOURCE_GROUP = "Create Resource Group"
STEP_NETWORK = "Create Virtual Network and Subnets"
STEP_CLUSTER = "Create AKS Cluster"
STEP_DATABASE = "Create PostgreSQL Server"
STEP_STORAGE = "Create Storage Account and Container"
STEP_CDN = "Create CDN Profile and Endpoint"
STEP_DESTROY = "Delete Resource Group"

# ==========================================
# 10. Process Exit Codes
# ==========================================
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130
