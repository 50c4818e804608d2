from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from todo_api.dependencies import TodoSourceDep, get_current_user_id
from todo_api.models import TodoCreate, TodoRead, TodoUpdate

# Every route here requires a valid bearer token
router = APIRouter(
    prefix="/todos",
    tags=["todos"],
    dependencies=[Depends(get_current_user_id)],
    responses={401: {"description": "Missing, invalid or expired token"}},
)

_local_or_online = {
    200: {"model": TodoRead, "description": "The todo (upstream JSON when source=online)"},
    404: {"description": "Todo not found"},
}


@router.get("/", responses={200: {"model": list[TodoRead]}})
def list_todos(source: TodoSourceDep):
    """List the current user's todos, newest first."""
    return source.list()


@router.get("/{todo_id}", responses=_local_or_online)
def get_todo(todo_id: str, source: TodoSourceDep):
    """Get a single todo owned by the current user."""
    return source.get(todo_id)


@router.post("/", status_code=201, responses={201: {"model": TodoRead}})
def create_todo(todo_create: TodoCreate, source: TodoSourceDep):
    """Create a new todo for the current user."""
    return source.create(todo_create)


@router.put("/{todo_id}", responses=_local_or_online)
def update_todo(todo_id: str, todo_update: TodoUpdate, source: TodoSourceDep):
    """Partially update a todo (only provided fields)."""
    return source.update(todo_id, todo_update)


@router.delete("/{todo_id}", status_code=204, responses={404: {"description": "Todo not found"}})
def delete_todo(todo_id: str, source: TodoSourceDep):
    """Delete a todo."""
    body = source.delete(todo_id)
    if body is not None:
        return JSONResponse(status_code=status.HTTP_200_OK, content=body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{todo_id}/complete", responses={**_local_or_online, 501: {"description": "Not supported online"}})
def toggle_todo(todo_id: str, source: TodoSourceDep):
    """Flip the completed flag of a todo."""
    return source.toggle(todo_id)
