# app/routers/forms.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ADMIN, COORDINATOR, require_roles
from app.database import get_write_db
from app.models.evaluation import Answer, Evaluation, Form, Question
from app.schemas.form import FormCreate, FormResponse, QuestionCreate, QuestionResponse, QuestionUpdate

router = APIRouter(tags=["forms"])

form_managers = require_roles(ADMIN, COORDINATOR)


def _form_response(form: Form) -> FormResponse:
    return FormResponse(id_formulario=form.id, nombre=form.name)


def _question_response(question: Question) -> QuestionResponse:
    return QuestionResponse(
        id_pregunta=question.id,
        id_formulario=question.form_id,
        texto=question.text,
        tipo_pregunta=question.question_type,
    )


async def _get_form_or_404(db: AsyncSession, form_id: int) -> Form:
    form = await db.get(Form, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Formulario no encontrado")
    return form


@router.get("/formularios", response_model=List[FormResponse])
async def list_forms(db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)):
    result = await db.execute(select(Form).order_by(Form.id))
    return [_form_response(f) for f in result.scalars().all()]


@router.post("/formularios", response_model=FormResponse, status_code=201)
async def create_form(data: FormCreate, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)):
    form = Form(name=data.nombre)
    db.add(form)
    await db.commit()
    await db.refresh(form)
    return _form_response(form)


@router.put("/formularios/{form_id}", response_model=FormResponse)
async def update_form(
    form_id: int, data: FormCreate, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)
):
    form = await _get_form_or_404(db, form_id)
    form.name = data.nombre
    await db.commit()
    await db.refresh(form)
    return _form_response(form)


@router.delete("/formularios/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_form(form_id: int, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)):
    form = await _get_form_or_404(db, form_id)
    in_use = await db.execute(select(Evaluation.id).where(Evaluation.form_id == form_id).limit(1))
    if in_use.first() is not None:
        raise HTTPException(status_code=409, detail="El formulario tiene evaluaciones asociadas")
    await db.execute(delete(Question).where(Question.form_id == form_id))
    await db.delete(form)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/formularios/{form_id}/preguntas", response_model=List[QuestionResponse])
async def list_questions(form_id: int, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)):
    await _get_form_or_404(db, form_id)
    result = await db.execute(select(Question).where(Question.form_id == form_id).order_by(Question.id))
    return [_question_response(q) for q in result.scalars().all()]


@router.post("/preguntas", response_model=QuestionResponse, status_code=201)
async def create_question(data: QuestionCreate, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)):
    await _get_form_or_404(db, data.id_formulario)
    question = Question(form_id=data.id_formulario, text=data.texto, question_type=data.tipo_pregunta)
    db.add(question)
    await db.commit()
    await db.refresh(question)
    return _question_response(question)


@router.put("/preguntas/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int, data: QuestionUpdate, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)
):
    question = await db.get(Question, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Pregunta no encontrada")
    if data.texto is not None:
        question.text = data.texto
    if data.tipo_pregunta is not None:
        question.question_type = data.tipo_pregunta
    await db.commit()
    await db.refresh(question)
    return _question_response(question)


@router.delete("/preguntas/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(question_id: int, db: AsyncSession = Depends(get_write_db), user=Depends(form_managers)):
    question = await db.get(Question, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Pregunta no encontrada")
    answered = await db.execute(select(Answer.id).where(Answer.question_id == question_id).limit(1))
    if answered.first() is not None:
        raise HTTPException(status_code=409, detail="La pregunta ya tiene respuestas registradas")
    await db.delete(question)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
