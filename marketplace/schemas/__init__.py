from marketplace.schemas.common import Page, ErrorResponse
from marketplace.schemas.job import JobCreate, JobDetailsUpdate, JobStateUpdate, JobResponse
from marketplace.schemas.application import ApplicationResponse
from marketplace.schemas.invoice import InvoiceCreate, InvoiceStateUpdate, InvoiceResponse
