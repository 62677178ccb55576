from typing import List
from sqlalchemy.orm import Session
from models.addresses import Address
from schemas.address_schemas import CreateAddressRequest


class AddressService:

    @staticmethod
    def list_addresses(db: Session, user_id: int) -> List[Address]:
        return db.query(Address).filter(Address.user_id == user_id).order_by(Address.id.asc()).all()

    @staticmethod
    def create_address(db: Session, user_id: int, request: CreateAddressRequest) -> Address:
        model = Address(
            user_id=user_id,
            street=request.street,
            city=request.city,
            region=request.region,
            notes=request.notes
        )
        db.add(model)
        db.commit()
        db.refresh(model)
        return model

    @staticmethod
    def get_owned_address(db: Session, user_id: int, address_id: int) -> Address | None:
        return db.query(Address).filter(
            Address.id == address_id,
            Address.user_id == user_id
        ).one_or_none()
