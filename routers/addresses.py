from fastapi import APIRouter
from starlette import status
from utils.deps import user_dependency, db_dependency
from utils.responses import api_response
from schemas.address_schemas import CreateAddressRequest
from services.address_service import AddressService


router = APIRouter(
    prefix="/addresses",
    tags=["addresses"]
)


def serialize_address(address) -> dict:
    return {
        "id": address.id,
        "street": address.street,
        "city": address.city,
        "region": address.region,
        "notes": address.notes
    }


@router.get("", status_code=status.HTTP_200_OK)
async def get_addresses(user: user_dependency, db: db_dependency):
    addresses = AddressService.list_addresses(db, user.get("user_id"))
    return api_response([serialize_address(a) for a in addresses], "Addresses retrieved")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_address(body: CreateAddressRequest, user: user_dependency, db: db_dependency):
    address = AddressService.create_address(db, user.get("user_id"), body)
    return api_response(serialize_address(address), "Address saved", status.HTTP_201_CREATED)
