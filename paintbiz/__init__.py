from .api import BusinessApi
from .categories import DEFAULT_CATEGORIES, CategoryStore, JsonFileStore, MemoryStore
from .errors import NetworkError, NotFound, PaintBizError, UploadError, ValidationError
from .forms import CreateMode, EditMode, JobForm, JobFormController
from .gallery import ImageFile, JobImageUploader
from .models import Customer, Job, JobImage, JobIn
